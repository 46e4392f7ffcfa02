"""
Unit Tests for Block Explorer Verification
"""

import json
import pytest
import aiohttp
from aiohttp import web
from aiohttp.test_utils import TestServer
from unittest.mock import AsyncMock, Mock, patch

from deployer.errors import ExplorerError
from deployer.explorer import ExplorerClient, encode_constructor_args
from scripts.verify_contract import verify_contract

from conftest import DEPLOYED_ADDRESS

GUID = "ezq878u486pzijkvvmerl6a9mzwhv6sefgvqi5tkwceejc7tvn"


@pytest.fixture
def client():
    client = ExplorerClient("https://api.etherscan.io/v2/api", "KEY", chain_id=80001)
    client._request = AsyncMock()
    return client


@pytest.fixture
def explorer_api():
    """aiohttp app recording requests and answering with queued replies"""
    received = []
    replies = []

    async def handler(request):
        form = await request.post()
        received.append({
            'method': request.method,
            'query': dict(request.query),
            'form': dict(form)
        })
        status, payload = replies.pop(0)
        # explorers often label JSON as text/html
        return web.Response(status=status, text=json.dumps(payload), content_type='text/html')

    app = web.Application()
    app.router.add_route('*', '/v2/api', handler)
    return app, received, replies


class TestExplorerClient:
    """Test the Etherscan-style verification flow"""

    @pytest.mark.asyncio
    async def test_submit_returns_guid(self, client):
        client._request.return_value = {'status': '1', 'message': 'OK', 'result': GUID}

        guid = await client.submit_verification(
            address=DEPLOYED_ADDRESS,
            contract_name='ParkPics',
            source_name='contracts/ParkPics.sol',
            standard_input={'language': 'Solidity'},
            compiler_version='v0.8.2+commit.661d1103'
        )

        assert guid == GUID
        method, params = client._request.call_args.args
        assert method == 'POST'
        assert params['action'] == 'verifysourcecode'
        assert params['contractname'] == 'contracts/ParkPics.sol:ParkPics'
        assert params['codeformat'] == 'solidity-standard-json-input'
        assert json.loads(params['sourceCode']) == {'language': 'Solidity'}

    @pytest.mark.asyncio
    async def test_submit_rejected(self, client):
        client._request.return_value = {'status': '0', 'message': 'NOTOK', 'result': 'Invalid API Key'}

        with pytest.raises(ExplorerError, match="Invalid API Key"):
            await client.submit_verification(DEPLOYED_ADDRESS, 'ParkPics', 'contracts/ParkPics.sol',
                                             {}, 'v0.8.2+commit.661d1103')

    @pytest.mark.asyncio
    async def test_submit_already_verified(self, client):
        client._request.return_value = {
            'status': '0', 'message': 'NOTOK', 'result': 'Contract source code already verified'
        }

        guid = await client.submit_verification(DEPLOYED_ADDRESS, 'ParkPics', 'contracts/ParkPics.sol',
                                                {}, 'v0.8.2+commit.661d1103')
        assert guid is None

    @pytest.mark.asyncio
    async def test_pending_then_verified(self, client):
        client._request.side_effect = [
            {'status': '0', 'result': 'Pending in queue'},
            {'status': '1', 'result': 'Pass - Verified'}
        ]

        assert await client.wait_for_verification(GUID, poll_interval=0)
        assert client._request.call_count == 2
        assert client._request.call_args.args[1]['guid'] == GUID

    @pytest.mark.asyncio
    async def test_verification_failed(self, client):
        client._request.return_value = {'status': '0', 'result': 'Fail - Unable to verify'}

        with pytest.raises(ExplorerError, match="Unable to verify"):
            await client.wait_for_verification(GUID, poll_interval=0)

    @pytest.mark.asyncio
    async def test_gives_up_while_pending(self, client):
        client._request.return_value = {'status': '0', 'result': 'Pending in queue'}

        with pytest.raises(ExplorerError, match="still pending"):
            await client.wait_for_verification(GUID, poll_interval=0, max_attempts=3)

        assert client._request.call_count == 3


class TestExplorerHttp:
    """Requests against a local explorer API server"""

    @pytest.mark.asyncio
    async def test_submit_posts_form_with_chainid(self, explorer_api):
        app, received, replies = explorer_api
        replies.append((200, {'status': '1', 'result': GUID}))

        async with TestServer(app) as server:
            client = ExplorerClient(str(server.make_url('/v2/api')), 'KEY', chain_id=137)
            guid = await client.submit_verification(
                DEPLOYED_ADDRESS, 'ParkPics', 'contracts/ParkPics.sol',
                {'language': 'Solidity'}, 'v0.8.2+commit.661d1103'
            )

        assert guid == GUID
        request = received[0]
        assert request['method'] == 'POST'
        assert request['query'] == {'chainid': '137'}
        assert request['form']['apikey'] == 'KEY'
        assert request['form']['action'] == 'verifysourcecode'
        assert json.loads(request['form']['sourceCode']) == {'language': 'Solidity'}

    @pytest.mark.asyncio
    async def test_status_check_is_a_get_with_chainid(self, explorer_api):
        app, received, replies = explorer_api
        replies.append((200, {'status': '1', 'result': 'Pass - Verified'}))

        async with TestServer(app) as server:
            async with aiohttp.ClientSession() as session:
                client = ExplorerClient(
                    str(server.make_url('/v2/api')), 'KEY', chain_id=80001, session=session
                )
                assert await client.check_status(GUID) == 'Pass - Verified'

        request = received[0]
        assert request['method'] == 'GET'
        assert request['query']['chainid'] == '80001'
        assert request['query']['guid'] == GUID
        assert request['query']['apikey'] == 'KEY'

    @pytest.mark.asyncio
    async def test_http_error_status(self, explorer_api):
        app, received, replies = explorer_api
        replies.append((502, {'status': '0', 'result': 'Bad Gateway'}))

        async with TestServer(app) as server:
            client = ExplorerClient(str(server.make_url('/v2/api')), 'KEY', chain_id=1)

            with pytest.raises(ExplorerError, match="HTTP 502"):
                await client.check_status(GUID)

    @pytest.mark.asyncio
    async def test_connection_failure(self, explorer_api):
        app, received, replies = explorer_api

        async with TestServer(app) as server:
            url = str(server.make_url('/v2/api'))

        client = ExplorerClient(url, 'KEY', chain_id=1)

        with pytest.raises(ExplorerError, match="request failed"):
            await client.check_status(GUID)


class TestConstructorArguments:
    """Test constructor argument encoding"""

    def test_no_arguments(self):
        assert encode_constructor_args([], []) == ""

    def test_encodes_without_prefix(self):
        inputs = [{'name': 'supply', 'type': 'uint256'}, {'name': 'owner', 'type': 'address'}]

        encoded = encode_constructor_args(inputs, [1, '0x' + '11' * 20])

        assert len(encoded) == 128
        assert encoded[:64] == '0' * 63 + '1'
        assert encoded[64:] == '0' * 24 + '11' * 20

    def test_tuple_argument(self):
        inputs = [{'type': 'tuple', 'components': [{'type': 'uint8'}, {'type': 'bool'}]}]

        assert len(encode_constructor_args(inputs, [(3, True)])) == 128

    def test_argument_count_mismatch(self):
        with pytest.raises(ExplorerError, match="takes 1 arguments"):
            encode_constructor_args([{'type': 'uint256'}], [])


class TestVerifyScript:
    """scripts/verify_contract.py against a recorded deployment"""

    @pytest.mark.asyncio
    async def test_verifies_recorded_deployment(self, config, artifact, project_dir):
        record_dir = project_dir / 'deployments' / 'hardhat'
        record_dir.mkdir(parents=True)
        (record_dir / 'ParkPics.json').write_text(json.dumps({
            'address': DEPLOYED_ADDRESS,
            'constructor_args': []
        }))

        client = Mock()
        client.submit_verification = AsyncMock(return_value=GUID)
        client.wait_for_verification = AsyncMock(return_value=True)

        with patch('scripts.verify_contract.SolidityCompiler') as compiler_cls:
            compiler = compiler_cls.return_value
            compiler.compile.return_value = artifact
            compiler.standard_input.return_value = {'language': 'Solidity'}
            compiler.long_version.return_value = 'v0.8.2+commit.661d1103'

            assert await verify_contract(config, 'hardhat', client=client)

        kwargs = client.submit_verification.call_args.kwargs
        assert kwargs['address'] == DEPLOYED_ADDRESS
        assert kwargs['compiler_version'] == 'v0.8.2+commit.661d1103'
        assert kwargs['constructor_arguments'] == ''
        client.wait_for_verification.assert_awaited_once_with(GUID)

    @pytest.mark.asyncio
    async def test_client_targets_network_chain(self, config, artifact, project_dir, monkeypatch):
        monkeypatch.setenv('PRIVATE_KEY', '0x' + '11' * 32)
        monkeypatch.setenv('ETHERSCAN_API_KEY', 'KEY')

        with patch('scripts.verify_contract.ExplorerClient') as client_cls, \
                patch('scripts.verify_contract.SolidityCompiler') as compiler_cls:
            compiler_cls.return_value.compile.return_value = artifact
            client_cls.return_value.submit_verification = AsyncMock(return_value=None)

            assert await verify_contract(config, 'mumbai', address=DEPLOYED_ADDRESS)

        client_cls.assert_called_once_with(
            'https://api.etherscan.io/v2/api', 'KEY', chain_id=80001
        )
