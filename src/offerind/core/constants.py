from __future__ import annotations

from enum import Enum


class OfferEvent(str, Enum):
    """Raw event names emitted by offer contracts."""

    CREATED = "Created"
    TITLE_CHANGED = "TitleChanged"
    ATTACHED_FILES_CHANGED = "AttachedFilesChanged"
    PRICE_CHANGED = "PriceChanged"
    CATEGORY_CHANGED = "CategoryChanged"
    SHIPS_FROM_CHANGED = "ShipsFromChanged"
    BOUGHT = "Bought"
    BUYER_REJECTED = "BuyerRejected"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class Property(str, Enum):
    """Public state getters of an offer contract."""

    CURRENT_STATUS = "currentStatus"
    CREATION_DATE = "creationDate"
    PURCHASE_DATE = "purchaseDate"
    CONFIRMATION_DATE = "confirmationDate"
    SHIPS_FROM = "shipsFrom"
    SELLER = "seller"
    BUYER = "buyer"
    PRICE = "price"
    TITLE = "title"
    CATEGORY = "category"
    ATTACHED_FILES = "attachedFiles"


# ABI return type of each getter (used to decode eth_call results)
PROPERTY_TYPES: dict[Property, str] = {
    Property.CURRENT_STATUS: "uint8",
    Property.CREATION_DATE: "uint256",
    Property.PURCHASE_DATE: "uint256",
    Property.CONFIRMATION_DATE: "uint256",
    Property.SHIPS_FROM: "bytes2",
    Property.SELLER: "address",
    Property.BUYER: "address",
    Property.PRICE: "uint256",
    Property.TITLE: "string",
    Property.CATEGORY: "bytes32",
    Property.ATTACHED_FILES: "bytes32",
}

# Solidity signatures of the offer contract events
OFFER_EVENT_SIGNATURES: list[str] = [
    "Created(address indexed seller, string title, uint256 price, bytes32 category, bytes2 shipsFrom, bytes32 attachedFiles)",
    "TitleChanged(string newTitle)",
    "PriceChanged(uint256 newPrice)",
    "CategoryChanged(bytes32 newCategory)",
    "ShipsFromChanged(bytes2 newShipsFrom)",
    "AttachedFilesChanged(bytes32 indexed newCID)",
    "Bought(address indexed buyer)",
    "BuyerRejected()",
    "Completed()",
    "Cancelled()",
]

GENESIS_BLOCK = 0
