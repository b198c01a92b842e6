import json

import pytest

import flashing_core.__main__ as cli


def _write_drawing(tmp_path):
    path = tmp_path / 'drawing.json'
    document = {
        'lines': [
            {
                'id': 'L1',
                'points': [[0, 0], [100, 0], [100, 50]],
                'endFold': {'selectedId': 'hem', 'segmentEdits': {'0': {'Length': 20, 'Angle': 90}}},
            }
        ]
    }
    path.write_text(json.dumps(document), encoding='utf-8')
    return path


def _write_catalog(tmp_path):
    path = tmp_path / 'folds.json'
    records = [{'Id': 'hem', 'Name': 'Hem', 'Label': 'Safety hem', 'Segments': [{'Angle': 90, 'Length': 20}]}]
    path.write_text(json.dumps(records), encoding='utf-8')
    return path


def test_main_prints_geometry_and_folds(tmp_path, capsys):
    cli.main([str(_write_drawing(tmp_path)), '--catalog', str(_write_catalog(tmp_path))])
    out = capsys.readouterr().out

    assert 'Line L1:' in out
    assert 'total length: 150.0' in out
    assert 'segment 0: 100.0' in out
    assert 'angle at 1: 90.0°' in out
    assert 'end fold Safety hem: (100.000, 50.000), (80.000, 50.000)' in out


def test_main_prints_labels_and_tapered_diagram(tmp_path, capsys):
    cli.main([str(_write_drawing(tmp_path)), '--labels', '--taper', '0=40', '--taper', 'bad'])
    out = capsys.readouterr().out

    assert 'label offsets:' in out
    assert 'L1:segment:0' in out
    assert 'L1:angle:1' in out
    assert 'Tapered diagram from L1:' in out
    assert 'segment: 100.0 -> 40.0' in out
    assert '(40.000, 50.000)' in out


def test_main_accepts_bare_list(tmp_path, capsys):
    path = tmp_path / 'lines.json'
    path.write_text(json.dumps([{'id': 'solo', 'points': [[0, 0], [3, 4]]}]), encoding='utf-8')
    cli.main([str(path)])
    assert 'total length: 5.0' in capsys.readouterr().out


def test_main_exits_on_invalid_input(tmp_path):
    path = tmp_path / 'broken.json'
    path.write_text('{"lines": [', encoding='utf-8')
    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(path)])
    assert excinfo.value.code == 1


def test_main_exits_on_bad_catalog(tmp_path):
    catalog = tmp_path / 'folds.json'
    catalog.write_text('[{"Name": "missing id"}]', encoding='utf-8')
    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(_write_drawing(tmp_path)), '--catalog', str(catalog)])
    assert excinfo.value.code == 1


def test_main_exits_when_nothing_to_taper(tmp_path):
    path = tmp_path / 'lines.json'
    path.write_text(json.dumps({'lines': [{'id': 'dot', 'points': [[1, 1]]}]}), encoding='utf-8')
    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(path), '--taper', '0=10'])
    assert excinfo.value.code == 1
