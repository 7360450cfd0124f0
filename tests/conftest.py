import os.path

import pytest


SAMPLE_DIR = os.path.join(os.path.dirname(__file__), 'sample')


def _read_sample(filename):
    with open(os.path.join(SAMPLE_DIR, filename), encoding='utf-8') as f:
        return f.read()


@pytest.fixture
def read_sample():
    return _read_sample
