import pytest

from dorkscan.dork_generator import CATEGORIES, DorkGenerator, parse_category_selection, validate_domain
from dorkscan.errors import InvalidDomainError


@pytest.fixture
def generator(config):
    return DorkGenerator(config)


def test_generate_has_no_duplicates_and_targets_domain(generator):
    dorks = generator.generate('example.com', list(CATEGORIES))

    assert dorks
    assert len(dorks) == len(set(dorks))
    assert all('example.com' in d for d in dorks)
    assert not any('{target}' in d for d in dorks)


def test_generic_log_dork_appears_once(generator):
    dorks = generator.generate('example.com', ['generic'])

    assert dorks.count('site:example.com filetype:log') == 1


def test_alternate_domain_probe_duplicating_a_category_dork_is_dropped(config):
    config['domain']['alternative_domains'] = ['example.com', 'admin.example.com']
    dorks = DorkGenerator(config).generate('example.com', ['generic'])

    assert dorks.count('site:example.com filetype:log') == 1
    assert 'site:admin.example.com inurl:admin' in dorks


def test_categories_are_emitted_in_selection_order(generator):
    ecommerce = generator.category_dorks('ecommerce', 'example.com')
    generic = generator.category_dorks('generic', 'example.com')

    dorks = generator.generate('example.com', ['ecommerce', 'generic', 'ecommerce'])

    assert dorks[:len(ecommerce)] == ecommerce
    assert dorks[len(ecommerce):len(ecommerce) + len(generic)] == generic


def test_alternate_domains_follow_category_dorks(config):
    config['domain']['alternative_domains'] = ['admin.example.com']
    dorks = DorkGenerator(config).generate('example.com', ['ecommerce'])

    assert dorks[-3:] == [
        'site:admin.example.com',
        'site:admin.example.com inurl:admin',
        'site:admin.example.com filetype:log',
    ]


def test_alternate_domains_ignored_without_variations(config):
    config['domain']['alternative_domains'] = ['admin.example.com']
    config['domain']['include_variations'] = False

    dorks = DorkGenerator(config).generate('example.com', ['ecommerce'])

    assert not any('admin.example.com' in d for d in dorks)


def test_invalid_alternate_domain_raises(config):
    config['domain']['alternative_domains'] = ['not a host']

    with pytest.raises(InvalidDomainError):
        DorkGenerator(config).generate('example.com', ['generic'])


def test_path_dorks_only_when_limited(config):
    config['domain']['paths'] = ['/admin', '/api']
    assert DorkGenerator(config).path_dorks('example.com') == []

    config['domain']['limit_paths'] = True
    dorks = DorkGenerator(config).generate('example.com', ['ecommerce'])

    assert dorks[-2:] == ['site:example.com inurl:/admin', 'site:example.com inurl:/api']


def test_unknown_category_raises(generator):
    with pytest.raises(ValueError):
        generator.category_dorks('gaming', 'example.com')


@pytest.mark.parametrize('domain', ['', '   ', 'localhost', 'exa mple.com', '-bad.com', 'http://example.com'])
def test_validate_domain_rejects(domain):
    with pytest.raises(InvalidDomainError):
        validate_domain(domain)


def test_validate_domain_normalizes():
    assert validate_domain(' Sub.Example.COM. ') == 'sub.example.com'


def test_generate_rejects_invalid_target(generator):
    with pytest.raises(InvalidDomainError):
        generator.generate('not_a_domain', ['generic'])


@pytest.mark.parametrize('answer, expected', [
    ('1', ['generic']),
    ('3,1', ['framework_specific', 'generic']),
    ('2, 2, 4', ['product_cms', 'ecommerce']),
    ('5', list(CATEGORIES)),
    ('all', list(CATEGORIES)),
    ('ecommerce', ['ecommerce']),
    ('productCMS, framework-specific', ['product_cms', 'framework_specific']),
    ('', ['generic']),
    ('9,x', ['generic']),
    (None, ['generic']),
])
def test_parse_category_selection(answer, expected):
    assert parse_category_selection(answer) == expected
