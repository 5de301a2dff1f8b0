"""
In-memory stand-ins for the chain connection, the signer and provider HTTP
endpoints, shared by the unit tests.
"""

import json
from typing import Any, Callable, Dict, List, Optional

import httpx
from solders.keypair import Keypair

from dex_swap_engine.errors import RpcError


class FakeConnection:
    """
    Scripted chain connection

    statuses: signature -> list of successive get_signature_status results
    send_results: list of values / exceptions returned by successive sends
    accounts: address -> account info dict (None or missing = absent)
    """

    def __init__(
        self,
        accounts: Optional[Dict[str, Any]] = None,
        statuses: Optional[Dict[str, List[Any]]] = None,
        send_results: Optional[List[Any]] = None,
        confirm_result: Optional[bool] = True,
    ):
        self.accounts = dict(accounts or {})
        self.statuses = {k: list(v) for k, v in (statuses or {}).items()}
        self.send_results = list(send_results or [])
        self.confirm_result = confirm_result
        self.sent: List[bytes] = []
        self.send_kwargs: List[Dict[str, Any]] = []
        self.status_calls: List[str] = []
        self.status_kwargs: List[Dict[str, Any]] = []
        self.account_reads: List[str] = []
        self.on_send: Optional[Callable[[bytes], None]] = None
        self.closed = False

    async def get_account_info(self, address: str, encoding: str = "base64", commitment=None):
        self.account_reads.append(address)
        value = self.accounts.get(address)
        if isinstance(value, Exception):
            raise value
        return value

    async def get_latest_blockhash(self, commitment=None):
        return {"blockhash": "11111111111111111111111111111111", "lastValidBlockHeight": 1000}

    async def send_raw_transaction(self, transaction: bytes, skip_preflight: bool = True,
                                   preflight_commitment=None, max_retries=None):
        self.sent.append(transaction)
        self.send_kwargs.append({"skip_preflight": skip_preflight, "max_retries": max_retries})
        if self.on_send:
            self.on_send(transaction)
        result = self.send_results.pop(0) if self.send_results else f"sig{len(self.sent)}"
        if isinstance(result, Exception):
            raise result
        return result

    async def get_signature_status(self, signature: str, search_transaction_history: bool = True,
                                   max_retries=None, rotate=True):
        self.status_calls.append(signature)
        self.status_kwargs.append({"max_retries": max_retries, "rotate": rotate})
        queue = self.statuses.get(signature)
        if not queue:
            return {"confirmationStatus": "confirmed", "err": None}
        result = queue.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    async def confirm_transaction(self, signature, last_valid_block_height=None, commitment=None,
                                  timeout_seconds=60.0, poll_interval=1.0):
        if isinstance(self.confirm_result, Exception):
            raise self.confirm_result
        return self.confirm_result

    async def close(self):
        self.closed = True


class FakeSigner:
    """Signer that tags bytes instead of producing real signatures"""

    def __init__(self, fail_on: Optional[int] = None):
        self._pubkey = str(Keypair().pubkey())
        self.fail_on = fail_on
        self.signed: List[bytes] = []

    @property
    def pubkey(self) -> str:
        return self._pubkey

    def sign_transaction(self, unsigned_tx: bytes):
        if self.fail_on is not None and len(self.signed) == self.fail_on:
            raise ValueError("key rejected")
        self.signed.append(unsigned_tx)
        return unsigned_tx + b"|signed", f"sig-{unsigned_tx.decode(errors='replace')}"


def rpc_failure(message: str = "connection reset") -> RpcError:
    return RpcError.connection_failed("http://rpc.test", Exception(message))


def json_response(payload: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(payload).encode(),
                          headers={"Content-Type": "application/json"})


class Router:
    """
    httpx.MockTransport handler keyed by (method, path)

    Records every request so tests can inspect params and bodies.
    """

    def __init__(self, routes: Dict[tuple, Any]):
        self.routes = routes
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, text="not found")
        if callable(handler):
            return handler(request)
        return handler

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def last(self, method: str, path: str) -> httpx.Request:
        for request in reversed(self.requests):
            if request.method == method and request.url.path == path:
                return request
        raise AssertionError(f"no {method} {path} request recorded")
