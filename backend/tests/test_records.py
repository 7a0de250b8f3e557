"""
Tests for indexed-record extraction.
"""
from skillgate.records import extract_records


class TestExtractRecords:
    """Tests for extract_records."""

    def test_groups_fields_by_index_in_order(self):
        payload = {
            'entry_1_name': 'Meera',
            'entry_0_name': 'Raj',
            'entry_0_phone': '9876543210',
            'entry_1_city': 'Pune',
        }
        records = extract_records(payload, 'entry')

        assert [r.index for r in records] == [0, 1]
        assert records[0].fields == {'name': 'Raj', 'phone': '9876543210'}
        assert records[1].fields == {'name': 'Meera', 'city': 'Pune'}

    def test_blank_records_are_skipped(self):
        payload = {
            'entry_0_name': '   ',
            'entry_0_phone': '',
            'entry_2_name': 'Asha',
        }
        records = extract_records(payload, 'entry')

        assert len(records) == 1
        assert records[0].index == 2
        assert records[0].position == 3

    def test_counts_fields_with_content(self):
        payload = {
            'org_0_name': 'Asha',
            'org_0_phone': ' ',
            'org_0_email': 'asha@example.com',
            'org_0_company': None,
        }
        record = extract_records(payload, 'org')[0]
        assert record.fields_with_content == 2

    def test_other_kinds_and_malformed_keys_ignored(self):
        payload = {
            'org_0_name': 'Asha',
            'entry_x_name': 'Bad index',
            'entryway': 'hall',
            'content': 'text',
        }
        assert extract_records(payload, 'entry') == []

    def test_field_names_may_contain_underscores(self):
        records = extract_records({'entry_0_first_name': 'Raj'}, 'entry')
        assert records[0].fields == {'first_name': 'Raj'}
        assert records[0].text('first_name') == 'Raj'

    def test_sparse_high_index(self):
        records = extract_records({'entry_100000000_name': 'Raj'}, 'entry')
        assert len(records) == 1
        assert records[0].index == 100000000

    def test_non_string_values_are_not_content(self):
        assert extract_records({'entry_0_age': 30}, 'entry') == []
