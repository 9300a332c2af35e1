import pytest

from joltage.machine import Machine, MachineParseError, parse_machines


def test_parse_example_line():
    m = Machine.parse("[.##.] (3) (1,3) (2) (2,3) (0,2) (0,1) {3,5,4,7}")
    assert m.num_positions == 4
    assert m.num_buttons == 6
    assert m.lights == 0b0110
    assert m.buttons == [0b1000, 0b1010, 0b0100, 0b1100, 0b0101, 0b0011]
    assert m.joltages == [3, 5, 4, 7]
    assert m.button_positions(1) == [1, 3]


def test_multi_digit_indices():
    pattern = "." * 12
    m = Machine.parse(f"[{pattern}] (10,11) (0) {{" + ",".join(["1"] * 12) + "}")
    assert m.button_positions(0) == [10, 11]


def test_str_round_trip():
    line = "[...#.] (0,2,3,4) (2,3) (0,4) (0,1,2) (1,2,3,4) {7,5,12,7,2}"
    assert str(Machine.parse(line)) == line


def test_parse_machines_skips_blank_lines(example_text):
    machines = parse_machines(example_text + "\n\n")
    assert len(machines) == 3
    assert machines[2].joltages == [10, 11, 11, 5, 10, 5]


@pytest.mark.parametrize(
    "line",
    [
        "(0) {1}",
        "[.#] (0) (2) {1,1}",
        "[.#] (0) {1}",
        "[.#] (0) {1,-1}",
        "[.#] (a) {1,1}",
        "[.#] () {1,1}",
        "[.#] (0) junk {1,1}",
    ],
)
def test_malformed_lines_rejected(line):
    with pytest.raises(MachineParseError):
        Machine.parse(line)


def test_constructor_rejects_mismatched_joltages():
    with pytest.raises(ValueError):
        Machine(0, [0b1], [1, 2], width=1)
