# tests/test_hierarchy.py
from pcap_forensics.parsers.hierarchy import parse_protocol_hierarchy

from conftest import PHS_OUT


def _preorder(nodes, depth=0):
    for n in nodes:
        yield n, depth
        yield from _preorder(n.children, depth + 1)


def _expected_depths(indents):
    """Count the chain of strictly-smaller indents scanning backwards."""
    depths = []
    for i, own in enumerate(indents):
        d, cur = 0, own
        for j in range(i - 1, -1, -1):
            if indents[j] < cur:
                d += 1
                cur = indents[j]
        depths.append(d)
    return depths


def _text(indents):
    return "\n".join(f"{' ' * ind}p{i} frames:{i} bytes:{i * 10}" for i, ind in enumerate(indents))


def test_two_roots_with_one_child():
    text = "ip frames:10 bytes:100\n  tcp frames:8 bytes:80\nudp frames:2 bytes:20"
    roots = parse_protocol_hierarchy(text)
    assert [r.protocol for r in roots] == ["ip", "udp"]
    assert [c.protocol for c in roots[0].children] == ["tcp"]
    assert roots[0].frames == 10 and roots[0].bytes == 100
    assert roots[1].children == ()


def test_tshark_report_with_noise():
    roots = parse_protocol_hierarchy(PHS_OUT)
    assert len(roots) == 1
    eth = roots[0]
    assert eth.protocol == "eth"
    assert [c.protocol for c in eth.children] == ["ip", "arp"]
    ip = eth.children[0]
    assert [c.protocol for c in ip.children] == ["tcp", "udp"]
    assert ip.children[0].children[0].protocol == "tls"
    assert ip.children[1].children[0].protocol == "dns"
    assert ip.children[1].children[0].bytes == 1700


def test_unmatched_lines_with_counters_are_skipped():
    text = "frames:1 bytes:2\nip frames:x bytes:y\nip frames:3 bytes:4"
    roots = parse_protocol_hierarchy(text)
    assert [(r.protocol, r.frames, r.bytes) for r in roots] == [("ip", 3, 4)]


def test_dedent_closes_only_crossed_levels():
    # uneven indentation: the 3-space row closes the 4-space level only
    text = "a frames:1 bytes:1\n  b frames:1 bytes:1\n    c frames:1 bytes:1\n   d frames:1 bytes:1"
    roots = parse_protocol_hierarchy(text)
    b = roots[0].children[0]
    assert [c.protocol for c in b.children] == ["c", "d"]


def test_preorder_matches_source_and_depths():
    cases = [
        [0, 2, 4, 2, 0],
        [0, 0, 0],
        [0, 2, 4, 6, 1, 3, 0, 5],
        [4, 2, 0, 2],
        [0, 3, 1, 2, 2, 0],
    ]
    for indents in cases:
        roots = parse_protocol_hierarchy(_text(indents))
        visited = list(_preorder(roots))
        assert [n.protocol for n, _ in visited] == [f"p{i}" for i in range(len(indents))]
        assert [d for _, d in visited] == _expected_depths(indents)


def test_empty_input():
    assert parse_protocol_hierarchy("") == []
