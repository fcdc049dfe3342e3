#!/usr/bin/env python3

import json
import logging
import sys

from batchgcd.actions import ACTION_LUT
from batchgcd.config import load_config
from batchgcd.errors import ConfigError

logger = logging.getLogger("gcdscan")


def dispatch_action(action, arguments, action_lut, config=None):
    """
    Mapped die action auf die korrespondierende Funktion.
    """
    mapped_action = action_lut.get(action)
    if mapped_action is None:
        return {"error": "Unknown action"}
    try:
        return mapped_action(arguments, config)
    except Exception as e:
        logger.error(f"Action {action} failed: {e}")
        return {"error": f"Action failed: {e}"}


def iter_testcases(data):
    """
    Liefert (uuid, content) für beide Dateiformate: mit oder ohne "testcases"-Wrapper.
    """
    testcases = data["testcases"] if "testcases" in data else data
    for uuid, content in testcases.items():
        yield uuid, content


def setup_logging(config):
    # stdout gehört den JSON-Antworten
    logging.basicConfig(
        level=config.logging.numeric_level(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )


def load_testcases(json_testcase):
    try:
        with open(json_testcase, 'r', encoding='utf-8') as file:
            return json.load(file)
    except FileNotFoundError:
        print(f"File {json_testcase} not found", file=sys.stderr)
        sys.exit(1)
    except json.decoder.JSONDecodeError as e:
        print(f"Invalid JSON: {e}", file=sys.stderr)
        sys.exit(1)


def load_config_or_exit(argv):
    config_path = argv[2] if len(argv) > 2 else None
    try:
        return load_config(config_path)
    except (FileNotFoundError, ConfigError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)


def main():
    """
    Liest eine JSON-Datei ein, interpretiert die action und die arguments
    und gibt als Ergebnis eine JSON im Einzeilenformat aus.
    """
    if len(sys.argv) not in (2, 3):
        print(f"Syntax: python3 {sys.argv[0]} <json_filename> [config.yaml]", file=sys.stderr)
        sys.exit(1)

    config = load_config_or_exit(sys.argv)
    setup_logging(config)
    data = load_testcases(sys.argv[1])

    for uuid, content in iter_testcases(data):
        action = content["action"]
        arguments = content["arguments"]
        response = dispatch_action(action, arguments, ACTION_LUT, config)
        print(json.dumps({"id": uuid, "reply": response}))


if __name__ == '__main__':
    main()
