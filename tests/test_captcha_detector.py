import pytest

from dorkscan import page_scripts
from dorkscan.captcha_detector import (CAPTCHA_SELECTORS, GRID_SELECTOR, GRID_THRESHOLD, ChallengeDetector,
                                       ensure_page_open)
from dorkscan.errors import DetectionError, PageUnavailable
from dorkscan.human_handoff import ATTENTION_MESSAGE
from tests.fakes import BLOCKED, CLEAN, FakePage, page_facts


def test_clean_page_is_not_detected():
    result = ChallengeDetector().detect(FakePage([CLEAN]))

    assert not result.detected
    assert result.reason is None


def test_blocked_page_reports_reason():
    result = ChallengeDetector().detect(FakePage([BLOCKED]))

    assert result.detected
    assert result.reason == 'page text contains "captcha"'


def test_selectors_are_passed_to_the_page():
    page = FakePage()
    ChallengeDetector().detect(page)

    script, arg = page.calls[0]
    assert script is page_scripts.DETECT_CHALLENGE
    assert arg == {'selectors': CAPTCHA_SELECTORS, 'gridSelector': GRID_SELECTOR}


def test_keyword_match_is_case_insensitive():
    detector = ChallengeDetector(keywords=['Slow Down'])

    result = detector.evaluate_facts(page_facts('Please SLOW DOWN and try later'))

    assert result.reason == 'page text contains "slow down"'


def test_first_keyword_in_list_order_wins():
    result = ChallengeDetector().evaluate_facts(page_facts('access denied: unusual traffic from a robot'))

    # 'robot' precedes 'unusual traffic' and 'access denied' in the keyword list
    assert result.reason == 'page text contains "robot"'


def test_keyword_takes_precedence_over_widget_and_grid():
    facts = page_facts('too many requests', matched_selector='div.g-recaptcha', tiles=9)

    result = ChallengeDetector().evaluate_facts(facts)

    assert result.reason == 'page text contains "too many requests"'


def test_widget_takes_precedence_over_grid():
    facts = page_facts('results', matched_selector='iframe[src*="hcaptcha"]', tiles=9)

    result = ChallengeDetector().evaluate_facts(facts)

    assert result.detected
    assert result.reason == 'captcha element found: iframe[src*="hcaptcha"]'


@pytest.mark.parametrize('tiles, detected', [(0, False), (GRID_THRESHOLD, False), (GRID_THRESHOLD + 1, True)])
def test_image_grid_must_exceed_threshold(tiles, detected):
    result = ChallengeDetector().evaluate_facts(page_facts('results', tiles=tiles))

    assert result.detected is detected


def test_own_attention_banner_is_ignored():
    page = FakePage([CLEAN])
    page.banner = ATTENTION_MESSAGE

    result = ChallengeDetector().detect(page)

    assert not result.detected


def test_challenge_under_the_banner_is_still_detected():
    page = FakePage([BLOCKED])
    page.banner = ATTENTION_MESSAGE

    assert ChallengeDetector().detect(page).detected


def test_banner_text_counts_when_not_reported_as_banner():
    facts = page_facts(ATTENTION_MESSAGE + '\nresults')

    assert ChallengeDetector().evaluate_facts(facts).detected


def test_evaluation_failure_counts_as_detected():
    result = ChallengeDetector().detect(FakePage([RuntimeError('execution context was destroyed')]))

    assert result.detected
    assert result.reason.startswith('detection error:')


@pytest.mark.parametrize('facts', ['not a dict', None, page_facts('results', tiles='many')])
def test_unexpected_result_counts_as_detected(facts):
    result = ChallengeDetector().detect(FakePage([facts]))

    assert result.detected
    assert result.reason.startswith('detection error:')


def test_inspect_raises_on_evaluation_failure():
    with pytest.raises(DetectionError):
        ChallengeDetector().inspect(FakePage([RuntimeError('boom')]))


def test_closed_page_raises_instead_of_detecting():
    page = FakePage(closed=True)

    with pytest.raises(PageUnavailable):
        ChallengeDetector().detect(page)
    assert page.calls == []


def test_page_closing_during_evaluation_raises_page_unavailable():
    page = FakePage()
    page.on_detect = FakePage.close

    with pytest.raises(PageUnavailable):
        ChallengeDetector().detect(page)


def test_ensure_page_open():
    class Broken:
        def is_closed(self):
            raise RuntimeError('connection lost')

    ensure_page_open(FakePage())
    with pytest.raises(PageUnavailable):
        ensure_page_open(None)
    with pytest.raises(PageUnavailable):
        ensure_page_open(Broken())
