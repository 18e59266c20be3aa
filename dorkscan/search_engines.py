"""
Search Engines & User Agents

Dorks are spread across several engines and browser identities.
A single engine hammered with site: queries starts serving CAPTCHAs
after a handful of requests; rotating engines and user agents keeps
each one below its rate limit for longer.
"""
import random
from urllib.parse import quote

from dorkscan.models import SearchEngine

SEARCH_ENGINES = [
    SearchEngine(
        name='Google',
        url='https://www.google.com/search?q=',
        result_selector='div.g',
        title_selector='h3',
        link_selector='a',
        snippet_selector='div.VwiC3b',
        stats_selector='#result-stats',
        cookie_accept_selector='button[id="L2AGLb"]',
    ),
    SearchEngine(
        name='Bing',
        url='https://www.bing.com/search?q=',
        result_selector='.b_algo',
        title_selector='h2',
        link_selector='a',
        snippet_selector='.b_caption p',
        stats_selector='.sb_count',
        cookie_accept_selector='#bnp_btn_accept',
    ),
    SearchEngine(
        name='DuckDuckGo',
        url='https://duckduckgo.com/?q=',
        result_selector='.result',
        title_selector='.result__title',
        link_selector='.result__a',
        snippet_selector='.result__snippet',
    ),
    SearchEngine(
        name='Yahoo',
        url='https://search.yahoo.com/search?p=',
        result_selector='.algo',
        title_selector='h3',
        link_selector='a.d-ib',
        snippet_selector='.compText',
        stats_selector='.searchCenterMiddle',
        cookie_accept_selector='button[name="agree"]',
    ),
]

USER_AGENTS = [
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.0 Safari/605.1.15',
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36 Edg/120.0.2210.91',
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:109.0) Gecko/20100101 Firefox/121.0',
    'Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36',
    'Mozilla/5.0 (iPhone; CPU iPhone OS 17_1_1 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.1 Mobile/15E148 Safari/604.1',
]

# Characters JavaScript's encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"


def build_search_url(engine: SearchEngine, dork: str) -> str:
    """Search URL for a dork on the given engine."""
    return f"{engine.url}{quote(dork, safe=_URI_COMPONENT_SAFE)}"


def pick_engine(chooser=random.choice, engines: list = None) -> SearchEngine:
    return chooser(engines or SEARCH_ENGINES)


def pick_user_agent(chooser=random.choice, user_agents: list = None) -> str:
    return chooser(user_agents or USER_AGENTS)
