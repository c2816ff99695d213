import pytest

from cors_middleware import PolicyConfig
from cors_settings import cors_enabled, env_flag, load_policy_config, split_list


def test_split_list():
    assert split_list(None) == []
    assert split_list('') == []
    assert split_list(' GET, POST ,,PUT ') == ['GET', 'POST', 'PUT']


@pytest.mark.parametrize('value, expected', [
    ('true', True),
    ('TRUE', True),
    (' True ', True),
    ('false', False),
    ('1', False),
])
def test_env_flag(value, expected):
    assert env_flag('FLAG', False, {'FLAG': value}) is expected


def test_env_flag_default():
    assert env_flag('FLAG', True, {}) is True
    assert env_flag('FLAG', False, {}) is False


def test_cors_enabled_by_default():
    assert cors_enabled({}) is True
    assert cors_enabled({'CORS_ENABLED': 'false'}) is False


def test_empty_environment_gives_default_policy():
    assert load_policy_config({}) == PolicyConfig()


def test_load_full_policy():
    config = load_policy_config({
        'CORS_ALLOWED_ORIGINS': 'https://a.com, https://b.com',
        'CORS_ALLOWED_METHODS': 'GET,POST',
        'CORS_ALLOWED_HEADERS': 'X-Custom, Content-Type',
        'CORS_EXPOSED_HEADERS': 'ETag, X-Total-Count',
        'CORS_MAX_AGE': '600',
        'CORS_SUPPORTS_CREDENTIALS': 'true',
    })
    assert config.allowed_origins == frozenset(['https://a.com', 'https://b.com'])
    assert config.allowed_methods == ('GET', 'POST')
    assert config.allowed_headers == frozenset(['x-custom', 'content-type'])
    assert config.exposed_headers == ('ETag', 'X-Total-Count')
    assert config.max_age == 600
    assert config.supports_credentials is True


def test_blank_exposed_headers_and_max_age_are_off():
    config = load_policy_config({'CORS_EXPOSED_HEADERS': ' ', 'CORS_MAX_AGE': ''})
    assert config.exposed_headers is None
    assert config.max_age is None


@pytest.mark.parametrize('value', ['ten', '-5', '1.5'])
def test_bad_max_age(value):
    with pytest.raises(ValueError, match='CORS_MAX_AGE'):
        load_policy_config({'CORS_MAX_AGE': value})


def test_reads_process_environment(monkeypatch):
    monkeypatch.setenv('CORS_ALLOWED_ORIGINS', 'https://env.example')
    monkeypatch.delenv('CORS_MAX_AGE', raising=False)
    assert load_policy_config().allowed_origins == frozenset(['https://env.example'])
