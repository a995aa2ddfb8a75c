"""Concrete query kinds."""

import base64
from dataclasses import dataclass
from typing import List, Optional, Union

from .entity_id import AccountId, FileId
from .money import Hbar
from .query_builder import QueryBuilder, Response
from .wire import MethodDescriptor

CRYPTO_SERVICE = "proto.CryptoService"
FILE_SERVICE = "proto.FileService"


class AccountBalanceQuery(QueryBuilder[Hbar]):
    """Balance of an account. Free: nodes answer it without a payment."""

    def __init__(self):
        super().__init__("cryptogetAccountBalance")

    def set_account_id(self, account_id: Union[AccountId, str]) -> "AccountBalanceQuery":
        self._inner.body["accountID"] = str(AccountId.coerce(account_id))
        return self

    def _get_method(self) -> MethodDescriptor:
        return MethodDescriptor(CRYPTO_SERVICE, "cryptoGetBalance")

    def _is_payment_required(self) -> bool:
        return False

    def _do_local_validate(self, errors: List[str]) -> None:
        if "accountID" not in self._inner.body:
            errors.append("`.set_account_id()` required")

    def _map_response(self, response: Response) -> Hbar:
        return Hbar.from_tinybar(int(self._response_body(response)["balance"]))


@dataclass(frozen=True)
class AccountInfo:
    account_id: AccountId
    balance: Hbar
    memo: str = ""
    deleted: bool = False
    proxy_account_id: Optional[AccountId] = None


class AccountInfoQuery(QueryBuilder[AccountInfo]):
    def __init__(self):
        super().__init__("cryptoGetInfo")

    def set_account_id(self, account_id: Union[AccountId, str]) -> "AccountInfoQuery":
        self._inner.body["accountID"] = str(AccountId.coerce(account_id))
        return self

    def _get_method(self) -> MethodDescriptor:
        return MethodDescriptor(CRYPTO_SERVICE, "getAccountInfo")

    def _do_local_validate(self, errors: List[str]) -> None:
        if "accountID" not in self._inner.body:
            errors.append("`.set_account_id()` required")

    def _map_response(self, response: Response) -> AccountInfo:
        info = self._response_body(response)["accountInfo"]
        proxy = info.get("proxyAccountID")
        return AccountInfo(
            account_id=AccountId.from_string(info["accountID"]),
            balance=Hbar.from_tinybar(int(info.get("balance", "0"))),
            memo=info.get("memo", ""),
            deleted=bool(info.get("deleted", False)),
            proxy_account_id=AccountId.from_string(proxy) if proxy else None,
        )


class FileContentsQuery(QueryBuilder[bytes]):
    def __init__(self):
        super().__init__("fileGetContents")

    def set_file_id(self, file_id: Union[FileId, str]) -> "FileContentsQuery":
        self._inner.body["fileID"] = str(FileId.coerce(file_id))
        return self

    def _get_method(self) -> MethodDescriptor:
        return MethodDescriptor(FILE_SERVICE, "getFileContent")

    def _do_local_validate(self, errors: List[str]) -> None:
        if "fileID" not in self._inner.body:
            errors.append("`.set_file_id()` required")

    def _map_response(self, response: Response) -> bytes:
        contents = self._response_body(response).get("fileContents", {})
        return base64.b64decode(contents.get("contents", ""))
