"""
Tests for row flattening and the Excel/CSV/JSON exports.
"""

import json

import pandas as pd
import pytest

from listing_harvester.exceptions import SinkFailure
from listing_harvester.items import CANONICAL_FIELDS, ExtractionFailure, HarvestResult, Record
from listing_harvester.sink import (
    ExcelSink,
    build_columns,
    export_failures,
    export_records,
    export_stats,
    flatten_record,
    flatten_value,
    output_path,
)


def make_record(url='https://www.infocasas.com.bo/inmueble/1', details=None, **kwargs):
    return Record(
        url=url,
        name='Casa en Urubó',
        price='$us 250.000',
        transaction_type='sale',
        details=details if details is not None else {'Dormitorios': '4', 'Baños': '3'},
        features=('4 Dorm.', '3 Baños'),
        **kwargs,
    )


class TestFlatten:

    def test_nested_values(self):
        assert flatten_value(None) == ''
        assert flatten_value(['a', 'b']) == 'a | b'
        assert flatten_value({'b': 2, 'a': 1}) == 'a: 1; b: 2'
        assert flatten_value({'z', 'x', 'y'}) == 'x | y | z'
        assert flatten_value({'list': ['x', 'y']}) == 'list: x | y'
        assert flatten_value('texto') == 'texto'

    def test_canonical_fields_first_then_details(self):
        row = flatten_record(make_record())

        assert list(row)[:len(CANONICAL_FIELDS)] == list(CANONICAL_FIELDS)
        assert row['features'] == '4 Dorm. | 3 Baños'
        assert row['Dormitorios'] == '4'
        assert row['Baños'] == '3'

    def test_canonical_field_wins_on_collision(self):
        row = flatten_record(make_record(details={'price': '1', 'name': {'x': 'y'}}))

        assert row['price'] == '$us 250.000'
        assert row['detail_price'] == '1'
        assert row['detail_name'] == 'x: y'

    def test_control_characters_stripped(self):
        assert flatten_value('Amplio\x0bdepartamento\x00') == 'Ampliodepartamento'
        assert flatten_value(['a\x1fb', 'c']) == 'ab | c'

    def test_collision_with_existing_detail_key_keeps_both(self):
        row = flatten_record(make_record(details={'features': 'x', 'detail_features': 'y'}))

        assert row['features'] == '4 Dorm. | 3 Baños'
        assert row['detail_features'] == 'y'
        assert row['detail_features_2'] == 'x'

    def test_header_colliding_with_canonical_header_renamed(self):
        rows = [flatten_record(make_record(details={'Price': '999', 'Area': '80 m²'}))]

        columns = build_columns(rows)
        headers = [header for header, _ in columns]

        assert len(headers) == len(set(headers))
        assert ('detail_Price', 'Price') in columns
        assert ('detail_Area', 'Area') in columns
        assert ('Price', 'price') in columns

    def test_deterministic(self):
        record = make_record(details={'Amenidades': ['Piscina', 'Parrillero'], 'Extras': {'b': '2', 'a': '1'}})

        assert flatten_record(record) == flatten_record(record)
        assert flatten_record(record)['Extras'] == 'a: 1; b: 2'

    def test_columns_union_in_first_seen_order(self):
        rows = [
            flatten_record(make_record(details={'Dormitorios': '2'})),
            flatten_record(make_record(details={'Garajes': '1', 'Dormitorios': '3'})),
        ]

        columns = build_columns(rows)

        assert columns[0] == ('URL', 'url')
        assert [key for _, key in columns][-2:] == ['Dormitorios', 'Garajes']


class TestExports:

    def test_output_path_is_sanitised(self, tmp_path):
        path = output_path(str(tmp_path), 'https://www.infocasas.com.bo/alquiler')

        assert path == str(tmp_path / 'https___www_infocasas_com_bo_alquiler.xlsx')

    def test_excel_written_with_parent_dirs_and_overwritten(self, tmp_path):
        path = str(tmp_path / 'nested' / 'dir' / 'out.xlsx')

        export_records([make_record()], path)
        export_records([make_record(url='https://a.com/1'), make_record(url='https://a.com/2')], path)

        df = pd.read_excel(path, sheet_name='Properties')
        assert len(df) == 2
        assert list(df['URL']) == ['https://a.com/1', 'https://a.com/2']
        assert 'Dormitorios' in df.columns

    def test_empty_result_still_writes_headers(self, tmp_path):
        path = str(tmp_path / 'empty.xlsx')

        export_records([], path)

        df = pd.read_excel(path)
        assert len(df) == 0
        assert 'Transaction Type' in df.columns

    def test_control_characters_do_not_break_workbook(self, tmp_path):
        path = str(tmp_path / 'out.xlsx')
        bad = Record(url='https://a.com/1', description='Amplio\x0bdepartamento')

        export_records([bad, make_record(url='https://a.com/2')], path)

        df = pd.read_excel(path, sheet_name='Properties').fillna('')
        assert len(df) == 2
        assert df.iloc[0]['Description'] == 'Ampliodepartamento'

    def test_duplicate_headers_not_written(self, tmp_path):
        path = str(tmp_path / 'out.xlsx')

        export_records([make_record(details={'Price': '999'})], path)

        df = pd.read_excel(path, sheet_name='Properties')
        assert df.iloc[0]['Price'] == '$us 250.000'
        assert str(df.iloc[0]['detail_Price']) == '999'
        assert len(df.columns) == len(set(df.columns))

    def test_unwritable_path_is_sink_failure(self, tmp_path):
        blocker = tmp_path / 'blocker'
        blocker.write_text('x')
        path = str(blocker / 'out.xlsx')

        with pytest.raises(SinkFailure) as excinfo:
            ExcelSink().write([], build_columns([]), path)

        assert excinfo.value.path == path

    def test_failures_csv(self, tmp_path):
        path = str(tmp_path / 'failed.csv')
        failures = [ExtractionFailure(url='https://a.com/1', stage='navigate', error='timeout', attempts=3)]

        export_failures(failures, path)

        df = pd.read_csv(path, encoding='utf-8-sig')
        assert list(df.columns) == ['url', 'stage', 'error', 'attempts']
        assert df.iloc[0]['url'] == 'https://a.com/1'

    def test_stats_json(self, tmp_path):
        path = str(tmp_path / 'stats.json')
        result = HarvestResult(source_url='https://a.com', records=[make_record()], attempted=2, page_count=3)

        export_stats(result, path)

        with open(path, encoding='utf-8') as f:
            stats = json.load(f)
        assert stats['attempted'] == 2
        assert stats['succeeded'] == 1
        assert stats['completion_rate'] == '50.00%'
        assert stats['page_count'] == 3
