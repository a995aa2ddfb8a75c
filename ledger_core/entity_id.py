from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class EntityId:
    """Ledger entity identity in ``shard.realm.num`` form."""

    shard: int
    realm: int
    num: int

    @classmethod
    def from_string(cls, value: str):
        parts = str(value).strip().split(".")
        if len(parts) != 3:
            raise ValueError(f"{cls.__name__} '{value}' must look like 'shard.realm.num'.")
        try:
            shard, realm, num = (int(part) for part in parts)
        except ValueError as exc:
            raise ValueError(f"{cls.__name__} '{value}' has a non-numeric component.") from exc
        if min(shard, realm, num) < 0:
            raise ValueError(f"{cls.__name__} '{value}' has a negative component.")
        return cls(shard, realm, num)

    @classmethod
    def coerce(cls, value):
        if isinstance(value, cls):
            return value
        return cls.from_string(value)

    def __str__(self) -> str:
        return f"{self.shard}.{self.realm}.{self.num}"


class AccountId(EntityId):
    """Account identity; nodes are addressed by their account id too."""


class FileId(EntityId):
    pass
