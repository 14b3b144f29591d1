"""Tests for buildifchanged.fingerprint."""

import hashlib
from unittest.mock import patch

import pytest

from buildifchanged.exceptions import HashingError
from buildifchanged.fingerprint import (
    expand_patterns,
    fingerprint,
    get_file_md5,
    string_md5,
)


class TestHashHelpers:

    def test_get_file_md5(self, ws):
        f = ws.create_file('a.txt', 'hello')
        assert get_file_md5(f) == hashlib.md5(b'hello').hexdigest()

    def test_string_md5(self):
        assert string_md5('echo hi') == hashlib.md5(b'echo hi').hexdigest()


class TestExpandPatterns:

    def test_matches_sorted(self, ws):
        ws.create_file('src/b.txt')
        ws.create_file('src/a.txt')
        ws.create_file('src/c.md')
        assert expand_patterns(ws.root, ['src/*.txt']) == ['src/a.txt', 'src/b.txt']

    def test_directories_excluded(self, ws):
        ws.create_file('src/a.txt')
        (ws.root / 'src' / 'sub.txt').mkdir()
        assert expand_patterns(ws.root, ['src/*']) == ['src/a.txt']

    def test_recursive_pattern(self, ws):
        ws.create_file('src/a.scss')
        ws.create_file('src/deep/b.scss')
        assert expand_patterns(ws.root, ['**/*.scss']) == [
            'src/a.scss', 'src/deep/b.scss'
        ]

    def test_pattern_order_kept_and_duplicates_dropped(self, ws):
        ws.create_file('z.txt')
        ws.create_file('a.txt')
        assert expand_patterns(ws.root, ['z.txt', '*.txt']) == ['z.txt', 'a.txt']

    def test_negation_removes_matches(self, ws):
        ws.create_file('src/a.txt')
        ws.create_file('src/skip.txt')
        assert expand_patterns(ws.root, ['src/*.txt', '!src/skip.txt']) == ['src/a.txt']

    def test_no_match(self, ws):
        assert expand_patterns(ws.root, ['nothing/*.txt']) == []


class TestFingerprint:

    def test_empty_pattern_set(self, ws):
        assert fingerprint(ws.root, []) == ''

    def test_no_matches_is_empty_string(self, ws):
        assert fingerprint(ws.root, ['missing.txt']) == ''

    def test_format(self, ws):
        ws.create_file('src/a.txt', 'A')
        ws.create_file('src/b.txt', 'B')
        expected = '\n'.join([
            hashlib.md5(b'A').hexdigest() + ' src/a.txt',
            hashlib.md5(b'B').hexdigest() + ' src/b.txt',
        ])
        assert fingerprint(ws.root, ['src/*.txt']) == expected

    def test_stable_across_calls(self, ws):
        for i in range(20):
            ws.create_file(f'data/{i:02d}.txt', str(i))
        first = fingerprint(ws.root, ['data/*.txt'], max_workers=4)
        assert fingerprint(ws.root, ['data/*.txt'], max_workers=1) == first
        assert fingerprint(ws.root, ['data/*.txt']) == first

    def test_one_byte_changes_fingerprint(self, ws):
        ws.create_file('a.txt', 'content')
        f = ws.create_file('b.txt', 'content')
        before = fingerprint(ws.root, ['*.txt'])
        with open(f, 'a') as fh:
            fh.write('x')
        assert fingerprint(ws.root, ['*.txt']) != before

    def test_added_file_changes_fingerprint(self, ws):
        ws.create_file('a.txt', 'content')
        before = fingerprint(ws.root, ['*.txt'])
        ws.create_file('b.txt', '')
        assert fingerprint(ws.root, ['*.txt']) != before

    def test_renamed_file_changes_fingerprint(self, ws):
        f = ws.create_file('a.txt', 'content')
        before = fingerprint(ws.root, ['*.txt'])
        f.rename(ws.path('b.txt'))
        assert fingerprint(ws.root, ['*.txt']) != before

    def test_read_failure_raises_hashing_error(self, ws):
        ws.create_file('a.txt', 'content')
        with patch('buildifchanged.fingerprint.get_file_md5',
                   side_effect=PermissionError('denied')):
            with pytest.raises(HashingError) as exc_info:
                fingerprint(ws.root, ['*.txt'])
        assert exc_info.value.path == 'a.txt'
        assert exc_info.value.exit_code == 4


class TestHiddenPaths:

    def test_hidden_files_skipped_by_wildcards(self, ws):
        ws.create_file('a.txt')
        ws.create_file('.env')
        ws.create_file('.cache/data.txt')
        ws.create_file('src/.hidden/b.txt')
        assert expand_patterns(ws.root, ['**/*']) == ['a.txt']

    def test_explicit_dot_segment_matches(self, ws):
        ws.create_file('.env')
        ws.create_file('.github/ci.yml')
        assert expand_patterns(ws.root, ['.env', '.github/*.yml']) == [
            '.env', '.github/ci.yml'
        ]

    def test_dot_wildcard_segment_matches(self, ws):
        ws.create_file('.eslintrc')
        ws.create_file('visible')
        assert expand_patterns(ws.root, ['.*']) == ['.eslintrc']


class TestExclude:

    def test_excluded_directory_never_matches(self, ws):
        ws.create_file('a.txt')
        ws.create_file('state/k-in-hashes')
        ws.create_file('statements/b.txt')
        assert expand_patterns(ws.root, ['**/*'], exclude=['state']) == [
            'a.txt', 'statements/b.txt'
        ]

    def test_fingerprint_ignores_excluded_directory(self, ws):
        ws.create_file('a.txt', 'a')
        before = fingerprint(ws.root, ['**/*'], exclude=['state/'])
        ws.create_file('state/k-in-hashes', 'changed')
        assert fingerprint(ws.root, ['**/*'], exclude=['state/']) == before
