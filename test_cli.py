#!/usr/bin/env python3
"""Command-line tests: run lzw.py the way a user would"""

import os
import random
import subprocess
import sys

import pytest

import lzw
import lzw_encode
from lzw_encode import OpenFailureError, compress, encode_bytes

HERE = os.path.dirname(os.path.abspath(__file__))

def run_tool(*args):
    return subprocess.run([sys.executable, os.path.join(HERE, 'lzw.py'), *args],
                          capture_output=True, cwd=HERE)

@pytest.fixture(autouse=True)
def reset_debug():
    yield
    lzw_encode.DEBUG = False

def write_input(tmp_path, data, name='input.bin'):
    path = tmp_path / name
    path.write_bytes(data)
    return str(path)

def test_compress_decompress_files(tmp_path):
    rng = random.Random(11)
    data = bytes(rng.choice(b'abcd\n') for _ in range(20000))
    src = write_input(tmp_path, data)
    packed = str(tmp_path / 'out.lzw')
    restored = str(tmp_path / 'out.bin')

    result = run_tool('compress', src, packed)
    assert result.returncode == 0, result.stderr
    assert b'Compressed:' in result.stdout

    result = run_tool('decompress', packed, restored)
    assert result.returncode == 0, result.stderr
    with open(restored, 'rb') as f:
        assert f.read() == data
    assert os.path.getsize(packed) < len(data)

def test_compress_to_stdout(tmp_path):
    data = b'TOBEORNOTTOBEORTOBEORNOT'
    result = run_tool('compress', write_input(tmp_path, data))
    assert result.returncode == 0, result.stderr
    assert result.stdout == encode_bytes(data)

def test_max_bits_and_hash_dictionary(tmp_path):
    rng = random.Random(12)
    data = bytes(rng.randrange(256) for _ in range(5000))
    src = write_input(tmp_path, data)
    packed = str(tmp_path / 'out.lzw')
    restored = str(tmp_path / 'out.bin')

    result = run_tool('compress', src, packed, '--max-bits', '9', '--dictionary', 'hash')
    assert result.returncode == 0
    assert b'Dictionary Full' in result.stderr

    assert run_tool('decompress', packed, restored, '--max-bits', '9').returncode == 0
    with open(restored, 'rb') as f:
        assert f.read() == data

def test_empty_input_fails(tmp_path, capsys):
    src = write_input(tmp_path, b'')
    assert lzw.main(['compress', src, str(tmp_path / 'out.lzw')]) == 1
    assert 'Error:' in capsys.readouterr().err

def test_missing_input_fails(tmp_path, capsys):
    assert lzw.main(['compress', str(tmp_path / 'nope.bin'), str(tmp_path / 'out.lzw')]) == 1
    assert 'nope.bin' in capsys.readouterr().err

def test_open_failure_on_output(tmp_path):
    src = write_input(tmp_path, b'abc')
    with pytest.raises(OpenFailureError):
        compress(src, str(tmp_path / 'missing-dir' / 'out.lzw'))

def test_bad_max_bits_rejected(tmp_path):
    result = run_tool('compress', write_input(tmp_path, b'abc'), '--max-bits', '21')
    assert result.returncode == 2

def test_debug_trace(tmp_path, capsys):
    src = write_input(tmp_path, b'AAAA')
    assert lzw.main(['compress', src, str(tmp_path / 'out.lzw'), '--debug']) == 0
    err = capsys.readouterr().err
    assert '[ENC] ADDED code=256 -> (65, 65)' in err
    assert '[ENC] OUTPUT code=256 width=9' in err
