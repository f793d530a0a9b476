from __future__ import annotations

from pathlib import Path

import pytest

from issueimport.security import (
    is_formula_like,
    mask_sensitive,
    sanitize_cell,
    sanitize_github_token,
    validate_safe_file_path,
)

CLASSIC_PAT = 'ghp_' + 'A' * 36
FINE_GRAINED_PAT = 'github_pat_' + 'b' * 71
LEGACY_HEX = 'a' * 40


@pytest.mark.parametrize('token', [CLASSIC_PAT, FINE_GRAINED_PAT, LEGACY_HEX])
def test_accepts_known_token_shapes(token: str):
    check = sanitize_github_token(f'  {token}\n')
    assert check.valid
    assert check.sanitized == token


@pytest.mark.parametrize('token', ['', '   ', 'ghp_short', 'not a token', None])
def test_rejects_bad_tokens(token):
    check = sanitize_github_token(token)
    assert not check.valid
    assert check.sanitized is None
    assert check.reason


def test_mask_token_keeps_edges():
    masked = mask_sensitive(CLASSIC_PAT)
    assert masked.startswith('ghp_')
    assert masked.endswith('AAAA')
    assert '*' in masked
    assert mask_sensitive('short') == '*****'


def test_mask_email_and_url():
    assert mask_sensitive('jane@example.com', 'email') == 'ja**@example.com'
    assert mask_sensitive('https://user:pw@example.com/path', 'url') == 'https://example.com/***'
    assert mask_sensitive('not-a-url', 'url') == '[INVALID_URL]'
    assert mask_sensitive(None) == '[INVALID]'


@pytest.mark.parametrize('value', ['=SUM(A1)', '+1', '-2', '@cmd', '  =x'])
def test_formula_detection(value: str):
    assert is_formula_like(value)
    assert sanitize_cell(value) == f"'{value}"


def test_plain_cells_untouched():
    assert not is_formula_like('Fix the = sign')
    assert sanitize_cell('Fix the = sign') == 'Fix the = sign'


def test_file_path_checks(tmp_path: Path):
    good = tmp_path / 'issues.csv'
    good.write_text('Title\nA\n', encoding='utf-8')
    assert validate_safe_file_path(good).safe

    wrong_ext = tmp_path / 'issues.txt'
    wrong_ext.write_text('Title\n', encoding='utf-8')
    assert validate_safe_file_path(wrong_ext).reason == 'Only CSV files are allowed'

    assert validate_safe_file_path(tmp_path / 'missing.csv').reason == 'File does not exist'
    assert validate_safe_file_path(tmp_path).reason == 'Path is not a file'


def test_file_size_limit(tmp_path: Path):
    big = tmp_path / 'big.csv'
    big.write_text('Title\n' + 'x' * 2048, encoding='utf-8')
    check = validate_safe_file_path(big, max_bytes=1024)
    assert not check.safe
    assert check.reason is not None
    assert check.reason.startswith('File too large')
