import pytest

from kvshortener.dao.memory import MappingMemoryDAO
from kvshortener.service import MappingService


@pytest.fixture()
def context():
    class _Context:
        function_name = 'kvshortener'

    return _Context()


@pytest.fixture()
def config():
    return {
        'active_backend': 'redis',
        'redis': {
            'host': 'redis.test',
            'port': 6379,
            'db': 0,
        },
        'allocator': {},
    }


@pytest.fixture()
def dao():
    return MappingMemoryDAO()


@pytest.fixture()
def service(dao):
    return MappingService(dao)


@pytest.fixture()
def request_context():
    return {'domainName': 'sho.rt', 'stage': 'Prod'}
