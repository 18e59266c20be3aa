import json
from pathlib import Path

import pytest

from dorkscan.checkpoint import CheckpointStore
from dorkscan.errors import FatalScanError, PersistenceError
from dorkscan.report_generator import ReportGenerator
from dorkscan.scanner import DorkScanner
from tests.fakes import ScriptedOperator

DORKS = [f'site:example.com inurl:page{n}' for n in range(25)]


def first(seq):
    return seq[0]


class FakeVerifier:
    def __init__(self, events=None, verified=True, fail_on=None):
        self.events = events if events is not None else []
        self.verified = verified
        self.fail_on = fail_on

    def verify(self, url, dork, index, engine=None):
        if index == self.fail_on:
            raise RuntimeError('browser crashed hard')
        self.events.append(('verify', index))
        return {'verified': self.verified, 'screenshot': f'/tmp/dork_{index}.png' if self.verified else None}


class RecordingStore(CheckpointStore):
    def __init__(self, path, events):
        super().__init__(path)
        self.events = events

    def save(self, index, report_content=None, processed_dorks=()):
        self.events.append(('save', index))
        return super().save(index, report_content, processed_dorks)


class BrokenStore(CheckpointStore):
    def save(self, index, report_content=None, processed_dorks=()):
        raise PersistenceError('disk full')


def make_scanner(config, operator=None, store=None, verifier=None):
    store = store or CheckpointStore(config['scan']['checkpoint_file'])
    return DorkScanner(config, operator or ScriptedOperator(), store, ReportGenerator(config),
                       verifier=verifier, chooser=first, sleep=lambda s: None)


def test_full_run_writes_reports_and_removes_checkpoint(config):
    config['scan']['pause_every'] = 0
    scanner = make_scanner(config)

    outcome = scanner.run('example.com', DORKS[:5])

    assert outcome.completed
    assert [r.dork for r in outcome.results] == DORKS[:5]
    assert outcome.results[0].search_url.startswith('https://www.google.com/search?q=site%3Aexample.com')
    assert outcome.stats.dorks_processed == 5
    assert not scanner.checkpoints.exists()
    assert set(outcome.report_paths) == {'json', 'text', 'stats', 'markdown'}
    assert all(Path(p).exists() for p in outcome.report_paths.values())

    listed = json.loads(Path(outcome.report_paths['json']).read_text(encoding='utf-8'))
    assert [entry['dork'] for entry in listed] == DORKS[:5]
    assert all('manualCheck' not in entry for entry in listed)


def test_rerun_after_completion_starts_from_scratch(config):
    config['scan']['pause_every'] = 0
    loaded = []

    class LoadRecordingStore(CheckpointStore):
        def load(self):
            checkpoint = super().load()
            loaded.append(checkpoint)
            return checkpoint

    store = LoadRecordingStore(config['scan']['checkpoint_file'])
    make_scanner(config, store=store).run('example.com', DORKS[:5])

    second = make_scanner(config, store=store).run('example.com', DORKS[:5])

    assert loaded[1].is_empty
    assert loaded[1].last_index == -1
    assert [r.dork for r in second.results] == DORKS[:5]
    assert second.stats.dorks_processed == 5
    assert second.completed
    assert not store.exists()


def test_resume_skips_checkpointed_dorks(config):
    config['scan']['pause_every'] = 0
    store = CheckpointStore(config['scan']['checkpoint_file'])
    store.save(2, 'previous\n', DORKS[:3])

    outcome = make_scanner(config, store=store).run('example.com', DORKS[:6])

    assert [r.dork for r in outcome.results] == DORKS[3:6]
    text = Path(outcome.report_paths['text']).read_text(encoding='utf-8')
    assert text.startswith('previous\n')
    assert DORKS[5] in text


def test_dork_already_processed_past_the_index_is_skipped(config):
    config['scan']['pause_every'] = 0
    store = CheckpointStore(config['scan']['checkpoint_file'])
    store.save(0, '', [DORKS[0], DORKS[2]])

    outcome = make_scanner(config, store=store).run('example.com', DORKS[:4])

    assert [r.dork for r in outcome.results] == [DORKS[1], DORKS[3]]


def test_checkpoint_saved_after_each_dork_is_handled(config):
    config['scan']['pause_every'] = 0
    events = []
    store = RecordingStore(config['scan']['checkpoint_file'], events)
    operator = ScriptedOperator(default='y')

    make_scanner(config, operator, store, FakeVerifier(events)).run('example.com', DORKS[:3])

    assert events == [('verify', 0), ('save', 0), ('verify', 1), ('save', 1), ('verify', 2), ('save', 2)]


def test_manual_verification_counts(config):
    config['scan']['pause_every'] = 0
    operator = ScriptedOperator(['y', 'n', 'y'])

    outcome = make_scanner(config, operator, verifier=FakeVerifier()).run('example.com', DORKS[:3])

    assert [r.manual_check for r in outcome.results] == [True, None, True]
    assert outcome.stats.manually_checked == 2
    assert outcome.results[0].screenshot_path == '/tmp/dork_0.png'


def test_failed_verification_is_recorded_but_not_counted(config):
    config['scan']['pause_every'] = 0
    operator = ScriptedOperator(default='y')

    outcome = make_scanner(config, operator, verifier=FakeVerifier(verified=False)).run('example.com', DORKS[:2])

    assert [r.manual_check for r in outcome.results] == [False, False]
    assert outcome.stats.manually_checked == 0


def test_no_prompt_when_manual_validation_is_off(config):
    config['scan']['manual_validation'] = False
    config['scan']['pause_every'] = 0
    operator = ScriptedOperator()

    make_scanner(config, operator, verifier=FakeVerifier()).run('example.com', DORKS[:3])

    assert operator.prompts == []


def test_operator_can_stop_at_pause_and_resume_later(config):
    operator = ScriptedOperator(['q'])
    scanner = make_scanner(config, operator)

    outcome = scanner.run('example.com', DORKS)

    assert not outcome.completed
    assert len(outcome.results) == 10
    assert len(operator.prompts) == 1
    assert scanner.checkpoints.load().last_index == 9

    resumed = make_scanner(config, ScriptedOperator()).run('example.com', DORKS)
    assert [r.dork for r in resumed.results] == DORKS[10:]
    assert resumed.completed


def test_pause_prompt_not_shown_after_last_dork(config):
    operator = ScriptedOperator()

    make_scanner(config, operator).run('example.com', DORKS[:20])

    # after dork 10 only; dork 20 is the last one
    assert len(operator.prompts) == 1


def test_checkpoint_write_failure_does_not_stop_the_scan(config, tmp_path):
    config['scan']['pause_every'] = 0
    store = BrokenStore(tmp_path / 'checkpoint.json')

    outcome = make_scanner(config, store=store).run('example.com', DORKS[:3])

    assert outcome.completed
    assert len(outcome.results) == 3
    assert outcome.stats.resume_guaranteed is False
    stats = json.loads(Path(outcome.report_paths['stats']).read_text(encoding='utf-8'))
    assert stats['resumeGuaranteed'] is False


def test_checkpoints_disabled(config):
    config['scan']['pause_every'] = 0
    config['scan']['save_checkpoint'] = False
    store = CheckpointStore(config['scan']['checkpoint_file'])
    store.save(1, '', DORKS[:2])

    outcome = make_scanner(config, store=store).run('example.com', DORKS[:3])

    assert len(outcome.results) == 3
    assert store.load().last_index == 1


def test_unexpected_error_writes_report_and_raises_fatal(config):
    config['scan']['pause_every'] = 0
    operator = ScriptedOperator(default='y')
    scanner = make_scanner(config, operator, verifier=FakeVerifier(fail_on=1))

    with pytest.raises(FatalScanError) as excinfo:
        scanner.run('example.com', DORKS[:3])

    report = Path(excinfo.value.report_path)
    assert report.exists()
    data = json.loads(report.read_text(encoding='utf-8'))
    assert data['type'] == 'RuntimeError'
    assert data['stats']['dorksProcessed'] == 1
    # the dork that failed was never checkpointed
    assert scanner.checkpoints.load().last_index == 0


def test_keyboard_interrupt_propagates(config):
    operator = ScriptedOperator([KeyboardInterrupt])
    scanner = make_scanner(config, operator, verifier=FakeVerifier())

    with pytest.raises(KeyboardInterrupt):
        scanner.run('example.com', DORKS[:3])
