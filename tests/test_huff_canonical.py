import random
from collections import Counter

import pytest

from bitpack import BitReader
from huff_canonical import (MAX_CODE_LEN, Node, build_tree, code_lengths_from_tree, build_code_lengths,
                            check_lengths, canonical_codes_from_lengths, build_decode_trie, decode_one_symbol)
from huff_errors import EmptyAlphabetOverflow, CodeLengthOverflow, MalformedHeader, CorruptStream
from metrics import encoded_bits

def _bits(code, L):
    return format(code, f"0{L}b")

def _random_freqs(seed, n_syms=40):
    rng = random.Random(seed)
    data = [rng.choice(range(n_syms)) for _ in range(rng.randint(1, 3000))]
    data += [rng.randrange(256) for _ in range(50)]
    return dict(Counter(data))


def test_aaaabbbcc_lengths_and_codes():
    freqs = {ord("a"): 4, ord("b"): 3, ord("c"): 2}
    lengths = build_code_lengths(freqs)
    assert lengths == {ord("a"): 1, ord("b"): 2, ord("c"): 2}
    codes = canonical_codes_from_lengths(lengths)
    assert codes == {ord("a"): (0b0, 1), ord("b"): (0b10, 2), ord("c"): (0b11, 2)}


def test_tree_frequencies_sum_to_children():
    root = build_tree({0: 40, 1: 35, 2: 20, 3: 5})
    assert root.freq == 100

    def walk(node):
        if node.is_leaf:
            return
        assert node.freq == node.left.freq + node.right.freq
        walk(node.left)
        walk(node.right)

    walk(root)


def test_tree_shape_reference():
    # a=40 b=35 c=20 d=5: a sits next to the root, d and c deepest
    a, b, c, d = (ord(x) for x in "abcd")
    root = build_tree({a: 40, b: 35, c: 20, d: 5})
    assert root.left.sym == a
    assert root.right.right.sym == b
    assert root.right.left.left.sym == d
    assert root.right.left.right.sym == c
    assert code_lengths_from_tree(root) == {a: 1, b: 2, c: 3, d: 3}


def test_ties_between_leaves_follow_symbol_order():
    root = build_tree({3: 1, 2: 1, 1: 1, 0: 1})
    assert [root.left.left.sym, root.left.right.sym] == [0, 1]
    assert [root.right.left.sym, root.right.right.sym] == [2, 3]


def test_leaf_pops_before_internal_node_of_equal_weight():
    root = build_tree({0: 1, 1: 1, 2: 2})
    assert root.left.sym == 2
    assert not root.right.is_leaf
    assert code_lengths_from_tree(root) == {2: 1, 0: 2, 1: 2}


def test_internal_nodes_pop_in_creation_order():
    # two internal nodes of weight 2 appear; the older one must end up on the left
    root = build_tree({0: 1, 1: 1, 2: 1, 3: 1})
    assert {root.left.left.sym, root.left.right.sym} == {0, 1}


def test_tree_is_immutable():
    root = build_tree({0: 1, 1: 2})
    with pytest.raises(AttributeError):
        root.freq = 7


def test_single_symbol_gets_one_bit():
    root = build_tree({120: 1000})
    assert not root.is_leaf
    assert root.left == Node(freq=1000, sym=120)
    assert root.right is None
    assert build_code_lengths({120: 1000}) == {120: 1}
    assert canonical_codes_from_lengths({120: 1}) == {120: (0, 1)}


def test_empty_table_raises():
    with pytest.raises(EmptyAlphabetOverflow):
        build_tree({})


def test_zero_counts_get_no_leaf():
    lengths = build_code_lengths({0: 0, 1: 5, 2: 3})
    assert lengths == {1: 1, 2: 1}
    assert build_tree({0: 0, 9: 4}) == Node(freq=4, left=Node(freq=4, sym=9))


def test_all_zero_counts_is_empty_alphabet():
    with pytest.raises(EmptyAlphabetOverflow):
        build_tree({7: 0})
    with pytest.raises(EmptyAlphabetOverflow):
        build_code_lengths({0: 0, 1: 0})


def test_negative_count_is_rejected():
    with pytest.raises(ValueError):
        build_tree({0: 3, 1: -1})


def test_word_tokens_order_by_bytes():
    lengths = build_code_lengths({b"the": 1, b" ": 1, b"a": 2})
    assert lengths == {b"a": 1, b" ": 2, b"the": 2}
    codes = canonical_codes_from_lengths(lengths)
    assert codes == {b"a": (0, 1), b" ": (0b10, 2), b"the": (0b11, 2)}


def test_optimal_cost_reference_set():
    # textbook set: optimal prefix code costs 224 bits
    freqs = dict(zip(b"abcdef", [45, 13, 12, 16, 9, 5]))
    lengths = build_code_lengths(freqs)
    assert encoded_bits(freqs, lengths) == 224


def test_optimal_cost_second_reference_set():
    freqs = {0: 40, 1: 35, 2: 20, 3: 5}
    assert encoded_bits(freqs, build_code_lengths(freqs)) == 185


@pytest.mark.parametrize("seed", range(5))
def test_codes_are_prefix_free(seed):
    codes = canonical_codes_from_lengths(build_code_lengths(_random_freqs(seed)))
    words = [_bits(c, L) for c, L in codes.values()]
    for i, x in enumerate(words):
        for j, y in enumerate(words):
            if i != j:
                assert not y.startswith(x)


@pytest.mark.parametrize("seed", range(5))
def test_codes_are_canonical(seed):
    codes = canonical_codes_from_lengths(build_code_lengths(_random_freqs(seed)))
    items = sorted(codes.items(), key=lambda kv: (kv[1][1], kv[0]))
    for (sa, (ca, la)), (sb, (cb, lb)) in zip(items, items[1:]):
        if la == lb:
            assert cb == ca + 1
        else:
            assert ca << (lb - la) < cb
    assert items[0][1][0] == 0


def test_code_length_overflow_is_reported():
    freqs = {0: 1, 1: 1, 2: 2, 3: 4}
    assert max(build_code_lengths(freqs).values()) == 3
    with pytest.raises(CodeLengthOverflow):
        build_code_lengths(freqs, max_len=2)


def test_fibonacci_weights_overflow_default_limit():
    fib = [1, 1]
    while len(fib) < MAX_CODE_LEN + 2:
        fib.append(fib[-1] + fib[-2])
    freqs = {i: f for i, f in enumerate(fib)}
    with pytest.raises(CodeLengthOverflow):
        build_code_lengths(freqs)
    # one symbol fewer fits exactly
    del freqs[len(fib) - 1]
    assert max(build_code_lengths(freqs).values()) == MAX_CODE_LEN


def test_max_len_cannot_exceed_hard_limit():
    with pytest.raises(ValueError):
        build_code_lengths({0: 1, 1: 1}, max_len=MAX_CODE_LEN + 1)


@pytest.mark.parametrize("lengths", [
    {0: 1, 1: 1, 2: 1},   # over-subscribed
    {0: 1, 1: 2},         # incomplete
    {5: 2},               # lone symbol must be 1 bit
    {0: 0, 1: 1},
    {0: MAX_CODE_LEN + 1, 1: 1},
])
def test_check_lengths_rejects(lengths):
    with pytest.raises(MalformedHeader):
        check_lengths(lengths)


def test_check_lengths_accepts_huffman_tables():
    check_lengths({5: 1})
    check_lengths({0: 1, 1: 2, 2: 2})
    check_lengths(build_code_lengths(_random_freqs(7)))


def test_canonical_assignment_rejects_oversubscription():
    with pytest.raises(MalformedHeader):
        canonical_codes_from_lengths({0: 1, 1: 1, 2: 1})


def test_decode_trie_walk():
    trie = build_decode_trie({ord("a"): (0, 1), ord("b"): (0b10, 2), ord("c"): (0b11, 2)})
    br = BitReader(bytes([0b10110000]))
    assert [decode_one_symbol(trie, br) for _ in range(4)] == [ord(x) for x in "bcaa"]
    assert br.bits_read == 6


def test_decode_trie_rejects_prefix_clash():
    with pytest.raises(MalformedHeader):
        build_decode_trie({0: (0, 1), 1: (0b01, 2)})
    with pytest.raises(MalformedHeader):
        build_decode_trie({1: (0b01, 2), 0: (0, 1)})


def test_unknown_path_is_corrupt():
    trie = build_decode_trie({120: (0, 1)})
    with pytest.raises(CorruptStream):
        decode_one_symbol(trie, BitReader(b"\x80"))
