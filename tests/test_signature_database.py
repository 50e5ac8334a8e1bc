import json

import pytest

from boardwatch.identify import LocalBoardLookup
from boardwatch.platforms import SignatureDatabase

_DATA = {
    "platforms": [
        {
            "id": "arduino:avr",
            "maintainer": "Arduino",
            "name": "Arduino AVR Boards",
            "boards": [
                {
                    "id": "uno",
                    "name": "Arduino Uno",
                    "identification": [
                        {"vid": "0x2341", "pid": "0x0043"},
                        {"vid": "0x2341", "pid": "0x0001"},
                    ],
                },
                {"id": "nano", "name": "Arduino Nano", "identification": []},
            ],
        },
        {
            "id": "esp32:esp32",
            "maintainer": "Espressif Systems",
            "boards": [
                {
                    "id": "xiao",
                    "name": "XIAO ESP32S3",
                    "identification": [{"vid": "0x2886", "pid": "0x0056", "board": "xiao"}],
                }
            ],
        },
    ]
}


def test_identify_board_matches_any_signature_case_insensitively() -> None:
    db = SignatureDatabase.from_dict(_DATA)

    matches = db.identify_board({"vid": "0X2341", "pid": "0x0001", "serialNumber": "x"})

    assert [b.fqbn for b in matches] == ["arduino:avr:uno"]
    assert matches[0].platform.maintainer == "Arduino"


def test_identify_board_requires_every_signature_key() -> None:
    db = SignatureDatabase.from_dict(_DATA)

    assert db.identify_board({"vid": "0x2886", "pid": "0x0056"}) == []
    assert [b.name for b in db.identify_board({"vid": "0x2886", "pid": "0x0056", "board": "xiao"})] == [
        "XIAO ESP32S3"
    ]


def test_board_without_signatures_never_matches() -> None:
    db = SignatureDatabase.from_dict(_DATA)

    assert db.identify_board({}) == []


def test_local_lookup_carries_maintainer_for_ranking() -> None:
    lookup = LocalBoardLookup(SignatureDatabase.from_dict(_DATA))

    result = lookup.identify({"vid": "0x2341", "pid": "0x0043"})

    assert len(result) == 1
    assert result[0].name == "Arduino Uno"
    assert result[0].maintainer == "Arduino"
    assert result[0].first_party is True


def test_from_file_loads_json_and_tolerates_missing_file(tmp_path) -> None:
    path = tmp_path / "platforms.json"
    path.write_text(json.dumps(_DATA))

    db = SignatureDatabase.from_file(path)
    missing = SignatureDatabase.from_file(tmp_path / "missing.json")

    assert [p.id for p in db.platforms] == ["arduino:avr", "esp32:esp32"]
    assert missing.platforms == []


def test_from_dict_rejects_platform_without_id() -> None:
    with pytest.raises(ValueError):
        SignatureDatabase.from_dict({"platforms": [{"maintainer": "x", "boards": []}]})
