"""Row loading and parsing unit tests."""
import json
import sys, os
import yaml
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

import pytest
from tech_radar.data.rows import load_rows, parse_rows, parse_bool


def test_parse_rows_by_role_not_position():
    """Columns are matched by header name, case- and space-insensitive."""
    records = [
        {' Ring ': 'Adopt', 'QUADRANT': 'Tools', 'Name': 'Git', 'New': 'yes'},
        {'Name': 'Make', 'Quadrant': 'Tools', 'Ring': 'Hold', 'Description': 'old'},
    ]
    rows = parse_rows(records, columns={'sector': 'Quadrant', 'isNew': 'New'})
    assert [r.name for r in rows] == ['Git', 'Make']
    assert rows[0].ring == 'Adopt' and rows[0].sector == 'Tools'
    assert rows[0].is_new is True and rows[0].description == ''
    assert rows[1].is_new is False and rows[1].description == 'old'
    assert [r.number for r in rows] == [1, 2]
    print("  PASS: role-based lookup")


def test_parse_rows_drops_malformed_rows_only():
    records = [
        {'name': 'A', 'sector': 'Tools', 'ring': 'Adopt'},
        {'name': '', 'sector': 'Tools', 'ring': 'Adopt'},
        {'name': 'C', 'sector': 'Tools'},
        'not a mapping',
        {'name': 'D', 'sector': 'Tools', 'ring': 'Trial', 'isNew': True},
    ]
    rows = parse_rows(records)
    assert [r.name for r in rows] == ['A', 'D']
    assert [r.number for r in rows] == [1, 2]
    assert rows[1].is_new is True


def test_parse_bool():
    for v in (True, 1, 2.0, 'true', 'Yes', ' y ', '1', 'NEW'):
        assert parse_bool(v) is True
    for v in (False, 0, None, '', 'false', 'no', 'n', '0', 'maybe'):
        assert parse_bool(v) is False


def test_load_rows_csv_json_yaml(tmp_path):
    csv_path = tmp_path / 'rows.csv'
    csv_path.write_text('name,sector,ring\nA,Tools,Adopt\nB,Languages,Trial\n')
    assert len(load_rows(str(csv_path))) == 2

    json_path = tmp_path / 'rows.json'
    json_path.write_text(json.dumps({'rows': [{'name': 'A', 'sector': 'T', 'ring': 'R'}]}))
    assert load_rows(str(json_path))[0]['name'] == 'A'

    yaml_path = tmp_path / 'rows.yaml'
    yaml_path.write_text(yaml.safe_dump([{'name': 'A', 'sector': 'T', 'ring': 'R'}]))
    rows = parse_rows(load_rows(str(yaml_path)))
    assert rows[0].sector == 'T'


def test_load_rows_rejects_unknown_format(tmp_path):
    path = tmp_path / 'rows.txt'
    path.write_text('A,Tools,Adopt')
    with pytest.raises(ValueError):
        load_rows(str(path))


if __name__ == '__main__':
    test_parse_rows_by_role_not_position()
    test_parse_bool()
    print("All row tests passed.")
