"""Convert examples/people/people.json with a custom function.

Run from the repository root:
    python examples/people/main.py
"""

import json
import sys
from pathlib import Path

from jinxml import Converter

HERE = Path(__file__).parent


def concat(*parts):
    return "".join(str(part) for part in parts)


def main():
    converter = Converter(
        template_path=HERE / "person.yml",
        format_spacing=2,
        functions={"concat": concat},
    )
    people = json.loads((HERE / "people.json").read_text())

    with converter.stream("<People>", "</People>", output=sys.stdout) as stream:
        stream.write(people)
    sys.stdout.write("\n")


if __name__ == "__main__":
    main()
