"""
CDL trace classification tests.

Ranges must cover the bank exactly, stay in order, and never put two
ranges of the same kind next to each other.
"""

import random

import pytest

from da65ify.trace import Range, RangeKind, classify_bank, kind_of

CODE = RangeKind.CODE
DATA = RangeKind.BYTETABLE


def _check_cover(ranges, start, size):
    assert ranges[0].start == start
    assert ranges[-1].end == start + size - 1
    for prev, cur in zip(ranges, ranges[1:]):
        assert cur.start == prev.end + 1
        assert cur.kind != prev.kind
    assert sum(r.size for r in ranges) == size


class TestKindOf:
    def test_bits(self):
        assert kind_of(0x00) is DATA
        assert kind_of(0x01) is CODE
        assert kind_of(0x02) is DATA
        assert kind_of(0x03) is CODE, "code bit wins over data bit"

    def test_bank_bits_ignored(self):
        assert kind_of(0x0C) is DATA
        assert kind_of(0x0D) is CODE


class TestClassifyBank:
    def test_untouched_bank_is_one_bytetable(self):
        ranges = classify_bank(bytes(0x4000), 0x8000)
        assert ranges == [Range(0x8000, 0xBFFF, DATA)]

    def test_mixed_example(self):
        ranges = classify_bank(bytes([1, 1, 2, 2, 0, 3]), 0x8000)
        assert ranges == [
            Range(0x8000, 0x8001, CODE),
            Range(0x8002, 0x8004, DATA),
            Range(0x8005, 0x8005, CODE),
        ]

    def test_data_then_unreached_stays_one_range(self):
        """02 followed by 00 changes the low bits but not the kind."""
        ranges = classify_bank(bytes([2, 2, 0, 0]), 0xC000)
        assert ranges == [Range(0xC000, 0xC003, DATA)]

    def test_code_and_code_data_merge(self):
        ranges = classify_bank(bytes([1, 3, 1, 0x05]), 0x8000)
        assert ranges == [Range(0x8000, 0x8003, CODE)]

    def test_addresses_follow_start(self):
        ranges = classify_bank(bytes([0, 1]), 0xE000)
        assert ranges[1] == Range(0xE001, 0xE001, CODE)

    def test_empty_trace_rejected(self):
        with pytest.raises(ValueError):
            classify_bank(b"", 0x8000)

    @pytest.mark.parametrize("seed", [1, 7, 42])
    def test_cover_and_minimal_on_noise(self, seed):
        rng = random.Random(seed)
        trace = bytes(rng.choice([0, 0, 0, 1, 1, 2, 3, 0x0D]) for _ in range(0x2000))
        ranges = classify_bank(trace, 0xA000)
        _check_cover(ranges, 0xA000, 0x2000)
        for r in ranges:
            assert all(kind_of(b) is r.kind for b in trace[r.start - 0xA000:r.end - 0xA000 + 1])

    def test_input_not_retained(self):
        """Ranges hold plain ints; reusing the buffer does not change them."""
        buf = bytearray([1] * 16)
        ranges = classify_bank(buf, 0x8000)
        buf[:] = bytes(16)
        assert ranges == [Range(0x8000, 0x800F, CODE)]
