# provide dataclass models and their stored (camelCase JSON) shape

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, Dict, Optional, Tuple


def utc_now() -> datetime:
    """Current UTC time, truncated to milliseconds so it survives a round trip."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def to_iso(when: datetime) -> str:
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    when = when.astimezone(timezone.utc)
    return when.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def from_iso(raw: str) -> datetime:
    when = datetime.fromisoformat(raw)
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return when


class ActivityType(StrEnum):
    ACCOUNT_CREATED = "account_created"
    LOGIN = "login"
    LOGOUT = "logout"
    ORDER_PLACED = "order_placed"


@dataclass(frozen=True)
class OrderItem:
    name: str
    quantity: int
    price: float
    size: Optional[str] = None

    @property
    def subtotal(self) -> float:
        return self.quantity * self.price

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name}
        if self.size is not None:
            data["size"] = self.size
        data["quantity"] = self.quantity
        data["price"] = self.price
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> OrderItem:
        return cls(
            name=data["name"],
            quantity=int(data["quantity"]),
            price=data["price"],
            size=data.get("size"),
        )


@dataclass(frozen=True)
class Order:
    id: str
    date: datetime
    items: Tuple[OrderItem, ...]
    total: float
    status: str
    shipping_address: str

    @property
    def items_total(self) -> float:
        # total is stored as given, this is what it should add up to
        return sum(item.subtotal for item in self.items)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": to_iso(self.date),
            "items": [item.to_dict() for item in self.items],
            "total": self.total,
            "status": self.status,
            "shippingAddress": self.shipping_address,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Order:
        return cls(
            id=data["id"],
            date=from_iso(data["date"]),
            items=tuple(OrderItem.from_dict(i) for i in data.get("items", [])),
            total=data["total"],
            status=data["status"],
            shipping_address=data.get("shippingAddress", ""),
        )


@dataclass(frozen=True)
class Address:
    label: str
    address: str
    city: str
    state: str
    pincode: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "pincode": self.pincode,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Address:
        return cls(
            label=data.get("label", ""),
            address=data.get("address", ""),
            city=data.get("city", ""),
            state=data.get("state", ""),
            pincode=str(data.get("pincode", "")),
        )


@dataclass(frozen=True)
class ActivityEvent:
    id: int
    type: str  # an ActivityType value; unknown types are kept as plain strings
    description: str
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": str(self.type),
            "description": self.description,
            "timestamp": to_iso(self.timestamp),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ActivityEvent:
        return cls(
            id=int(data["id"]),
            type=data["type"],
            description=data.get("description", ""),
            timestamp=from_iso(data["timestamp"]),
        )


@dataclass(frozen=True)
class Preferences:
    notifications: bool = True
    newsletter: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"notifications": self.notifications, "newsletter": self.newsletter}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Preferences:
        return cls(
            notifications=bool(data.get("notifications", True)),
            newsletter=bool(data.get("newsletter", False)),
        )


@dataclass(frozen=True)
class UserRecord:
    email: str
    first_name: str
    last_name: str
    password: str  # plaintext, compared by equality
    created_at: datetime
    orders: Tuple[Order, ...] = ()
    addresses: Tuple[Address, ...] = ()
    activities: Tuple[ActivityEvent, ...] = ()  # newest first
    preferences: Optional[Preferences] = field(default_factory=Preferences)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "password": self.password,
            "createdAt": to_iso(self.created_at),
            "orders": [o.to_dict() for o in self.orders],
            "addresses": [a.to_dict() for a in self.addresses],
            "activities": [a.to_dict() for a in self.activities],
        }
        if self.preferences is not None:
            data["preferences"] = self.preferences.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> UserRecord:
        prefs = data.get("preferences")
        return cls(
            email=data["email"],
            first_name=data.get("firstName", ""),
            last_name=data.get("lastName", ""),
            password=data["password"],
            created_at=from_iso(data["createdAt"]),
            orders=tuple(Order.from_dict(o) for o in data.get("orders", [])),
            addresses=tuple(Address.from_dict(a) for a in data.get("addresses", [])),
            activities=tuple(
                ActivityEvent.from_dict(a) for a in data.get("activities", [])
            ),
            preferences=Preferences.from_dict(prefs) if prefs is not None else None,
        )


@dataclass(frozen=True)
class Session:
    email: str
    login_time: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {"email": self.email, "loginTime": to_iso(self.login_time)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Session:
        return cls(email=data["email"], login_time=from_iso(data["loginTime"]))
