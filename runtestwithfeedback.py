import json
import sys
from typing import Dict, List, Optional

from batchgcd.actions import ACTION_LUT
from gcdscan import dispatch_action, iter_testcases, load_config_or_exit, load_testcases, setup_logging


class Feedback:
    """Zählt, welche Testcases die erwartete Antwort geliefert haben."""

    def __init__(self):
        self.correct: List[str] = []
        self.mismatched: List[str] = []
        self.missing_expected: List[str] = []
        self.unknown_action: List[str] = []

    @property
    def total(self) -> int:
        return len(self.correct) + len(self.incorrect)

    @property
    def incorrect(self) -> List[str]:
        return self.mismatched + self.missing_expected

    def summary_lines(self) -> List[str]:
        lines = [f"korrekt: {len(self.correct)}/{self.total}, inkorrekt: {len(self.incorrect)}/{self.total}"]
        if self.missing_expected:
            lines.append(f"Fehlende expectedResults für Cases: {len(self.missing_expected)}")
        if self.unknown_action:
            lines.append(f"Unbekannte Actions in Cases: {len(self.unknown_action)}")
        if self.mismatched:
            lines.append("Fehlgeschlagene Testcases (IDs): " + ", ".join(self.mismatched))
        return lines


def check_testcases(data, config=None, expected_results: Optional[Dict] = None, out=None) -> Feedback:
    """
    Führt alle Testcases aus, schreibt jede Antwort als JSON-Zeile nach out und
    vergleicht sie mit expected_results. Auch unbekannte Actions werden verglichen,
    die Antwort ist dann {"error": "Unknown action"}.
    """
    out = out or sys.stdout
    feedback = Feedback()
    for uuid, content in iter_testcases(data):
        action = content.get("action")
        if action not in ACTION_LUT:
            feedback.unknown_action.append(uuid)

        response = dispatch_action(action, content.get("arguments", {}), ACTION_LUT, config)
        print(json.dumps({"id": uuid, "reply": response}), file=out)

        if expected_results is None:
            continue
        if uuid not in expected_results:
            feedback.missing_expected.append(uuid)
        elif response == expected_results[uuid]:
            feedback.correct.append(uuid)
        else:
            feedback.mismatched.append(uuid)
    return feedback


def main():
    if len(sys.argv) not in (2, 3):
        print(f"Syntax: python3 {sys.argv[0]} <json_filename> [config.yaml]", file=sys.stderr)
        sys.exit(1)

    config = load_config_or_exit(sys.argv)
    setup_logging(config)
    data = load_testcases(sys.argv[1])

    expected_results = data.get("expectedResults") if "testcases" in data else None
    feedback = check_testcases(data, config, expected_results)

    if expected_results is None:
        return
    for line in feedback.summary_lines():
        print(line, file=sys.stderr)
    if feedback.incorrect:
        sys.exit(1)


if __name__ == '__main__':
    main()
