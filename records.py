"""
records.py — Output records for detail pages and catalog listings

Created     : 2026-10-17
Description :
    GameDetailRecord is produced once per target address. It is either a
    success record (domain fields populated, error is None) or an error
    record (error populated, every domain field absent). Mixing both raises
    ValueError at construction time.

    ListingRecord is the lighter summary read from category and search pages.

    Both serialize to plain dictionaries through `to_dict` for the JSON
    results file.
"""

import datetime  # For capture timestamps
from dataclasses import dataclass, field, fields  # For record definitions
from typing import Any, Dict, List, Optional  # For type hints


DOMAIN_FIELDS = (
    "title",
    "price",
    "all_prices",
    "original_price",
    "discount",
    "description",
    "rating",
    "platform",
    "publisher",
    "release_date",
    "genres",
    "image",
)  # Fields that must be absent on error records


def utc_timestamp() -> str:
    """
    Returns the current UTC time as an ISO-8601 string.

    :return: Timestamp string such as "2026-10-17T10:00:00.000000+00:00"
    """

    return datetime.datetime.now(datetime.timezone.utc).isoformat()  # Timezone-aware capture time


@dataclass(frozen=True)
class GameDetailRecord:
    """
    Facts extracted from one game detail page.
    """

    url: str
    title: Optional[str] = None
    price: Optional[str] = None
    all_prices: Optional[List[str]] = None
    original_price: Optional[str] = None
    discount: Optional[str] = None
    description: Optional[str] = None
    rating: Optional[str] = None
    platform: Optional[str] = None
    publisher: Optional[str] = None
    release_date: Optional[str] = None
    genres: Optional[List[str]] = None
    image: Optional[str] = None
    scraped_at: str = field(default_factory=utc_timestamp)
    error: Optional[str] = None

    def __post_init__(self) -> None:
        if self.error is None:  # Success records need no further checks
            return  # Nothing to validate
        populated = [name for name in DOMAIN_FIELDS if getattr(self, name) is not None]  # Domain fields that carry a value
        if populated:  # An error record must not carry domain data
            raise ValueError(f"Error record for {self.url} carries domain fields: {', '.join(populated)}")

    @classmethod
    def error_record(cls, url: str, message: str) -> "GameDetailRecord":
        """
        Builds an error record for a target.

        :param url: Target address
        :param message: Failure description
        :return: GameDetailRecord with only url, scraped_at and error set
        """

        return cls(url=url, error=message or "Unknown error")  # Never store an empty error description

    @property
    def is_error(self) -> bool:
        return self.error is not None  # Error records carry an error description

    def to_dict(self) -> Dict[str, Any]:
        """
        Serializes the record for the JSON results file.

        :return: Dictionary; error records only contain url, error and scraped_at
        """

        if self.is_error:  # Error records omit every domain field
            return {"url": self.url, "error": self.error, "scraped_at": self.scraped_at}
        data = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "error"}  # Every field except error
        data["all_prices"] = list(self.all_prices or [])  # Always serialize the audit list as a list
        return data  # Return the serialized success record


@dataclass(frozen=True)
class ListingRecord:
    """
    Summary of one product card on a category or search page.
    """

    title: str
    price: str
    link: str
    image: str

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "price": self.price, "link": self.link, "image": self.image}
