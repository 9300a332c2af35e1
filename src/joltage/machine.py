from __future__ import annotations

import re

_LINE = re.compile(
    r"^\[(?P<lights>[.#]*)\]\s*(?P<buttons>.*?)\s*\{(?P<joltages>[^}]*)\}$"
)
_BUTTON = re.compile(r"\(([^)]*)\)")


class MachineParseError(ValueError):
    """Raised when a machine description line is malformed."""

    pass


class Machine:
    def __init__(
        self,
        lights: int,
        buttons: list[int],
        joltages: list[int],
        width: int | None = None,
    ):
        self.width = len(joltages) if width is None else int(width)
        self.lights = int(lights)
        self.buttons = [int(b) for b in buttons]
        self.joltages = [int(j) for j in joltages]
        if len(self.joltages) != self.width:
            raise ValueError(
                f"Expected {self.width} joltages, got {len(self.joltages)}"
            )

    @property
    def num_positions(self) -> int:
        return self.width

    @property
    def num_buttons(self) -> int:
        return len(self.buttons)

    def button_positions(self, j: int) -> list[int]:
        mask = self.buttons[j]
        return [i for i in range(self.width) if mask >> i & 1]

    @staticmethod
    def parse(line: str) -> "Machine":
        """Parse `[.##.] (3) (1,3) (2) {3,5,4,7}` into a Machine."""
        m = _LINE.match(line.strip())
        if m is None:
            raise MachineParseError(f"Malformed machine line: {line!r}")

        pattern = m.group("lights")
        width = len(pattern)
        lights = 0
        for i, ch in enumerate(pattern):
            if ch == "#":
                lights |= 1 << i

        rest = m.group("buttons")
        buttons = []
        for group in _BUTTON.findall(rest):
            mask = 0
            for tok in group.split(","):
                idx = _parse_int(tok, line)
                if not 0 <= idx < width:
                    raise MachineParseError(
                        f"Button index {idx} outside {width} positions: {line!r}"
                    )
                mask |= 1 << idx
            buttons.append(mask)
        if _BUTTON.sub("", rest).strip():
            raise MachineParseError(f"Unexpected text between buttons: {line!r}")

        joltages = [_parse_int(tok, line) for tok in m.group("joltages").split(",")]
        if len(joltages) != width:
            raise MachineParseError(
                f"Expected {width} joltages, got {len(joltages)}: {line!r}"
            )
        if any(j < 0 for j in joltages):
            raise MachineParseError(f"Negative joltage target: {line!r}")

        return Machine(lights, buttons, joltages, width=width)

    def __repr__(self):
        return (
            f"Machine(positions={self.width}, buttons={self.num_buttons}, "
            f"joltages={self.joltages})"
        )

    def __str__(self) -> str:
        pattern = "".join(
            "#" if self.lights >> i & 1 else "." for i in range(self.width)
        )
        buttons = " ".join(
            "(" + ",".join(str(i) for i in self.button_positions(j)) + ")"
            for j in range(self.num_buttons)
        )
        joltages = ",".join(str(j) for j in self.joltages)
        return f"[{pattern}] {buttons} {{{joltages}}}"


def _parse_int(token: str, line: str) -> int:
    try:
        return int(token.strip())
    except ValueError:
        raise MachineParseError(f"Bad integer {token!r} in {line!r}") from None


def parse_machines(text: str) -> list[Machine]:
    return [Machine.parse(line) for line in text.splitlines() if line.strip()]
