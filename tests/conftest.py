"""
Pytest configuration and shared fixtures for canon_reader tests.
"""
import asyncio
from typing import Any, Dict, Iterable, List, Optional

import pytest

from canon_reader.services.catalog import BookCatalog, BookMeta
from canon_reader.services.reader import PageLoader, ReferenceResolver
from canon_reader.services.reader.types import StructureType, amud_to_daf
from canon_reader.services.text_store import InMemoryTextStore

VERSES_PER_CHAPTER = 10
LINES_PER_AMUD = 6


def verse_records(book: str, chapter: int, verses: int = VERSES_PER_CHAPTER) -> List[Dict[str, Any]]:
    return [
        {
            "ref": f"{book}.{chapter}.{verse}",
            "primary_text": "א" * 140,
            "secondary_text": "x" * 70,
            "c1": chapter,
            "c2": verse,
        }
        for verse in range(1, verses + 1)
    ]


def daf_records(tractate: str, amud: int, lines: int = LINES_PER_AMUD) -> List[Dict[str, Any]]:
    daf = amud_to_daf(amud)
    return [
        {"ref": f"{tractate}.{daf}.{line}", "primary_text": "ג" * 90, "c1": amud, "c2": line}
        for line in range(1, lines + 1)
    ]


def halakha_records(book: str, chapter: int, halakhot: int = 2, segments: int = 3) -> List[Dict[str, Any]]:
    return [
        {
            "ref": f"{book}.{chapter}.{halakha}.{segment}",
            "primary_text": "ד" * 60,
            "c1": chapter,
            "c2": halakha,
            "c3": segment,
        }
        for halakha in range(1, halakhot + 1)
        for segment in range(1, segments + 1)
    ]


def mitzvah_records(book: str, number: int) -> List[Dict[str, Any]]:
    return [{"ref": f"{book}.{number}", "primary_text": "ה" * 200, "c1": number}]


# Books outside the static tables: a three-level and a single-level structure
YERUSHALMI_BERAKHOT = BookMeta(
    slug="Jerusalem_Talmud_Berakhot",
    title="Jerusalem Talmud Berakhot",
    collection="yerushalmi",
    structure_type=StructureType.VERSE,
    depth=3,
    order=2001,
    first_section=1,
    last_section=9,
)
SEFER_HACHINUKH = BookMeta(
    slug="Sefer_HaChinukh",
    title="Sefer HaChinukh",
    collection="halakhah",
    structure_type=StructureType.SECTION_ONLY,
    depth=1,
    order=3001,
    first_section=1,
    last_section=613,
)


class GatedTextStore(InMemoryTextStore):
    """In-memory store whose section fetches wait until released."""

    def __init__(self, sections=None, books=None):
        super().__init__(sections, books)
        self.gates: Dict[str, asyncio.Event] = {}
        self.failures: Dict[str, Exception] = {}
        self.started: List[str] = []

    def gate(self, prefix: str) -> asyncio.Event:
        return self.gates.setdefault(prefix, asyncio.Event())

    def release(self, prefix: str) -> None:
        self.gate(prefix).set()

    async def fetch_section(self, section_prefix: str):
        self.started.append(section_prefix)
        gate = self.gates.get(section_prefix)
        if gate is not None:
            await gate.wait()
        failure = self.failures.pop(section_prefix, None)
        if failure is not None:
            raise failure
        return await super().fetch_section(section_prefix)


def build_sections(
    tanakh: Optional[Dict[str, Iterable[int]]] = None,
    talmud: Optional[Dict[str, Iterable[int]]] = None,
) -> Dict[str, List[Dict[str, Any]]]:
    sections: Dict[str, List[Dict[str, Any]]] = {}
    for book, chapters in (tanakh or {}).items():
        for chapter in chapters:
            sections[f"{book}.{chapter}"] = verse_records(book, chapter)
    for tractate, amudim in (talmud or {}).items():
        for amud in amudim:
            sections[f"{tractate}.{amud_to_daf(amud)}"] = daf_records(tractate, amud)
    return sections


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def catalog() -> BookCatalog:
    catalog = BookCatalog.default()
    catalog.register(YERUSHALMI_BERAKHOT)
    catalog.register(SEFER_HACHINUKH)
    return catalog


@pytest.fixture
def resolver(catalog: BookCatalog) -> ReferenceResolver:
    return ReferenceResolver(catalog)


@pytest.fixture
def corpus_sections() -> Dict[str, List[Dict[str, Any]]]:
    sections = build_sections(
        tanakh={
            "Genesis": range(1, 51),
            "Exodus": range(1, 41),
            "II_Chronicles": range(34, 37),
        },
        talmud={"Berakhot": range(3, 13)},
    )
    for chapter in (1, 2, 9):
        sections[f"Jerusalem_Talmud_Berakhot.{chapter}"] = halakha_records("Jerusalem_Talmud_Berakhot", chapter)
    for number in (1, 2, 3, 613):
        sections[f"Sefer_HaChinukh.{number}"] = mitzvah_records("Sefer_HaChinukh", number)
    return sections


@pytest.fixture
def store(corpus_sections) -> GatedTextStore:
    return GatedTextStore(corpus_sections)


@pytest.fixture
def loader(store: GatedTextStore, resolver: ReferenceResolver) -> PageLoader:
    return PageLoader(store, resolver)


@pytest.fixture
def mock_redis_client():
    """In-memory stand-in for the redis.asyncio client."""
    return FakeRedis()


class FakeRedis:
    def __init__(self) -> None:
        self._data: Dict[str, Any] = {}
        self._ttls: Dict[str, int] = {}

    async def get(self, key: str):
        return self._data.get(key)

    async def set(self, key: str, value: Any, *, ex: Optional[int] = None) -> bool:
        self._data[key] = value
        if ex is not None:
            self._ttls[key] = ex
        return True

    async def ping(self) -> bool:
        return True

    async def aclose(self) -> None:
        return None

    def ttl_for(self, key: str) -> Optional[int]:
        return self._ttls.get(key)
