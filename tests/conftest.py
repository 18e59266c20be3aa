import copy

import pytest

from dorkscan.utils import DEFAULTS
from tests.fakes import FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config(tmp_path):
    cfg = copy.deepcopy(DEFAULTS)
    cfg['domain']['target'] = 'example.com'
    cfg['domain']['alternative_domains'] = []
    cfg['scan']['results_dir'] = str(tmp_path / 'results')
    cfg['scan']['checkpoint_file'] = str(tmp_path / 'checkpoint.json')
    cfg['scan']['display_delay'] = 0
    cfg['scan']['search_delay'] = 0
    cfg['scan']['random_delay_max'] = 0
    cfg['handoff']['stable_window_ms'] = 0
    return cfg
