import pytest

from offerind.core.constants import OfferEvent
from offerind.core.errors import DecodeError
from offerind.core.events import CHANGE_MAPPING, build_event, family_of, projection_renames
from offerind.core.models import (
    BoughtEvent,
    ChangedEvent,
    EventKind,
    OfferStatus,
)
from offerind.decoding.mappers import address, ascii_text, decimal_text, status, text, utf8

from tests.factories import BUYER, OFFER_A, checksum


def test_changed_event_single_field():
    ev = ChangedEvent.of(OFFER_A, price="42")

    assert ev.price == "42"
    assert ev.title is None
    assert ev.category is None
    assert ev.ships_from is None
    assert ev.attached_files is None
    assert ev.to_dict() == {"kind": "changed", "offer": OFFER_A, "price": "42"}


def test_changed_event_requires_exactly_one_field():
    with pytest.raises(ValueError):
        ChangedEvent.of(OFFER_A)
    with pytest.raises(ValueError):
        ChangedEvent.of(OFFER_A, price="1", title="x")
    with pytest.raises(ValueError, match="not a changeable"):
        ChangedEvent(offer=OFFER_A, field="seller", value="0x0")


def test_change_mapping_covers_changeable_fields():
    assert [row.obj_field for row in CHANGE_MAPPING] == ["title", "price", "category", "ships_from", "attached_files"]
    assert all(family_of(row.event) is EventKind.CHANGED for row in CHANGE_MAPPING)
    assert family_of(OfferEvent.BOUGHT) is EventKind.BOUGHT


def test_projection_renames():
    assert projection_renames(OfferEvent.ATTACHED_FILES_CHANGED) == {"newCID": "attached_files"}
    assert projection_renames(OfferEvent.BOUGHT) == {"buyer": "buyer"}
    assert projection_renames(OfferEvent.CANCELLED) == {}


def test_build_event():
    assert build_event(OfferEvent.BOUGHT, {"offer": OFFER_A, "buyer": BUYER}) == BoughtEvent(offer=OFFER_A, buyer=BUYER)
    assert build_event(OfferEvent.TITLE_CHANGED, {"offer": OFFER_A, "title": "Bike"}) == ChangedEvent.of(OFFER_A, title="Bike")


def test_build_event_missing_field():
    with pytest.raises(DecodeError, match="buyer"):
        build_event(OfferEvent.BOUGHT, {"offer": OFFER_A})


def test_text_mapper():
    assert text("hello") == "hello"
    with pytest.raises(DecodeError, match="expecting string"):
        text(12)


def test_decimal_text_mapper():
    assert decimal_text(2**255) == str(2**255)
    assert decimal_text("100") == "100"
    for bad in (1.5, True, "-3", None):
        with pytest.raises(DecodeError):
            decimal_text(bad)


def test_bytes_mappers():
    assert utf8(b"caf\xc3\xa9" + b"\x00" * 27) == "café"
    assert utf8("0x" + b"books".hex()) == "books"
    assert ascii_text(b"FR") == "FR"
    assert ascii_text("already text") == "already text"
    with pytest.raises(DecodeError):
        ascii_text(b"\xff\xfe")
    with pytest.raises(DecodeError):
        utf8(7)


def test_address_mapper():
    assert address(OFFER_A) == checksum(OFFER_A)
    with pytest.raises(DecodeError):
        address("0x1234")


@pytest.mark.parametrize(
    "raw, expected",
    [
        (0, OfferStatus.WAITING_BUYER),
        ("1", OfferStatus.PENDING_CONFIRMATION),
        ("COMPLETED", OfferStatus.COMPLETED),
        (3, OfferStatus.CANCELLED),
    ],
)
def test_status_mapper(raw, expected):
    assert status(raw) is expected


def test_status_mapper_rejects_unknown():
    with pytest.raises(DecodeError, match="Unexpected OfferStatus"):
        status(9)
    with pytest.raises(DecodeError, match="Unexpected type"):
        status(None)
