"""
Block Explorer Client
Submits source verification to the Etherscan V2 API (Etherscan, Polygonscan and other chains)
"""

import json
import asyncio
from typing import Dict, List, Optional, Sequence
import aiohttp
from eth_abi import encode
from loguru import logger

from .errors import ExplorerError

PENDING = "Pending in queue"
VERIFIED = "Pass - Verified"
ALREADY_VERIFIED = "Already Verified"


def _abi_type(param: Dict) -> str:
    abi_type = param['type']
    if abi_type.startswith('tuple'):
        inner = ','.join(_abi_type(c) for c in param.get('components', []))
        return f"({inner}){abi_type[len('tuple'):]}"
    return abi_type


def encode_constructor_args(inputs: List[Dict], args: Sequence) -> str:
    """
    ABI-encode constructor arguments as the hex string explorers expect (no 0x)

    Args:
        inputs: Constructor 'inputs' from the ABI
        args: Argument values in declaration order
    """
    if len(inputs) != len(args):
        raise ExplorerError(
            f"Constructor takes {len(inputs)} arguments, {len(args)} given"
        )
    if not inputs:
        return ""
    return encode([_abi_type(i) for i in inputs], list(args)).hex()


class ExplorerClient:
    """
    Etherscan V2 contract verification API

    One endpoint serves every chain, selected by the chainid query
    parameter. Verification is asynchronous on the explorer side: a
    submission returns a GUID which is polled until it leaves the queue.
    """

    def __init__(
        self,
        api_url: str,
        api_key: str,
        chain_id: Optional[int] = None,
        session: Optional[aiohttp.ClientSession] = None,
        request_timeout: int = 30
    ):
        """
        Initialize Explorer Client

        Args:
            api_url: Explorer API endpoint, e.g. https://api.etherscan.io/v2/api
            api_key: Explorer API key
            chain_id: Chain the contract lives on (sent as chainid)
            session: Shared aiohttp session (None = one session per request)
            request_timeout: Per-request timeout in seconds
        """
        self.api_url = api_url
        self.api_key = api_key
        self.chain_id = chain_id
        self.session = session
        self.request_timeout = request_timeout

    def _query(self) -> Dict:
        if self.chain_id is None:
            return {}
        return {'chainid': str(self.chain_id)}

    async def _request(self, method: str, params: Dict) -> Dict:
        params = dict(params, apikey=self.api_key)

        if self.session is not None:
            return await self._send(self.session, method, params)

        timeout = aiohttp.ClientTimeout(total=self.request_timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            return await self._send(session, method, params)

    async def _send(self, session: aiohttp.ClientSession, method: str, params: Dict) -> Dict:
        if method == 'POST':
            request = session.post(self.api_url, params=self._query(), data=params)
        else:
            request = session.get(self.api_url, params=dict(self._query(), **params))

        try:
            async with request as response:
                if response.status != 200:
                    raise ExplorerError(f"Explorer returned HTTP {response.status}")
                # some explorers answer with text/html content type
                return await response.json(content_type=None)
        except aiohttp.ClientError as e:
            raise ExplorerError(f"Explorer request failed: {e}") from e

    async def submit_verification(
        self,
        address: str,
        contract_name: str,
        source_name: str,
        standard_input: Dict,
        compiler_version: str,
        constructor_arguments: str = ""
    ) -> Optional[str]:
        """
        Submit standard-JSON source for verification

        Args:
            address: Deployed contract address
            contract_name: Contract name
            source_name: Source unit containing the contract
            standard_input: solc standard-JSON input used to build it
            compiler_version: Long solc version, e.g. v0.8.2+commit.661d1103
            constructor_arguments: ABI-encoded constructor arguments (hex, no 0x)

        Returns:
            Verification GUID, or None when the source is already verified
        """
        response = await self._request('POST', {
            'module': 'contract',
            'action': 'verifysourcecode',
            'contractaddress': address,
            'sourceCode': json.dumps(standard_input),
            'codeformat': 'solidity-standard-json-input',
            'contractname': f"{source_name}:{contract_name}",
            'compilerversion': compiler_version,
            'constructorArguements': constructor_arguments
        })

        if str(response.get('status')) != '1':
            result = str(response.get('result'))
            if 'already verified' in result.lower():
                logger.info(f"{contract_name} at {address} is already verified")
                return None
            raise ExplorerError(f"Verification rejected: {result}")

        guid = response['result']
        logger.info(f"Verification submitted: {guid}")
        return guid

    async def check_status(self, guid: str) -> str:
        """Current verification status text for a GUID"""
        response = await self._request('GET', {
            'module': 'contract',
            'action': 'checkverifystatus',
            'guid': guid
        })
        return str(response.get('result', ''))

    async def wait_for_verification(
        self,
        guid: str,
        poll_interval: float = 5,
        max_attempts: int = 12
    ) -> bool:
        """
        Poll until the explorer finishes verifying

        Returns:
            True once verified
        """
        for attempt in range(max_attempts):
            status = await self.check_status(guid)

            if status == PENDING:
                logger.debug(f"Verification pending ({attempt + 1}/{max_attempts})")
                await asyncio.sleep(poll_interval)
                continue

            if status == VERIFIED or status.startswith(ALREADY_VERIFIED):
                return True

            raise ExplorerError(f"Verification failed: {status}")

        raise ExplorerError(f"Verification still pending after {max_attempts} checks")
