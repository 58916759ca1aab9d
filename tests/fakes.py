"""
One-record pouet.net dumps and a fake server serving them.
"""
import copy
import gzip
import json
from typing import Callable, Dict, List, Optional

import httpx

from pouet_sync.application.domain import ENTITIES, DumpSet
from pouet_sync.application.normalizer import build_catalogs
from pouet_sync.infrastructure.dump_models import RECORD_TYPES


DATE = "99991231"
MANIFEST_URL = "https://data.pouet.net/json.php"
DUMP_URLS = {
    entity: f"https://data.pouet.net/dumps/999912/pouetdatadump-{entity}-{DATE}.json.gz"
    for entity in ENTITIES
}

ANALOGUE = {
    "id": "1",
    "nickname": "analogue",
    "level": "administrator",
    "avatar": "analogue.gif",
    "glops": "850",
    "registerDate": "2000-01-01 00:00:00",
}

PROD = {
    "id": "1",
    "name": "Astral Blur",
    "type": "demo",
    "addedDate": "2000-01-01 00:00:00",
    "releaseDate": "1997-04-01",
    "voteup": "81",
    "votepig": "18",
    "votedown": "5",
    "voteavg": "0.73",
    "party_compo": "pc demo",
    "party_place": "3",
    "party_year": "1997",
    "party": {"id": "10", "name": "The Party"},
    "invitation": None,
    "invitationyear": "2000",
    "boardID": None,
    "rank": "665",
    "download": "https://files.example/astral_blur.zip",
    "platforms": {
        "1": {"name": "MS-Dos", "icon": "msdos.gif", "slug": "msdos"},
        "2": {"name": "Windows", "icon": "windows.gif", "slug": "windows"},
    },
    "groups": [{"id": "20", "name": "The Black Lotus", "acronym": "TBL"}],
    "placings": [
        {
            "party": {"id": "10", "name": "The Party"},
            "compo_name": "pc demo",
            "ranking": 3,
            "year": 1997,
        }
    ],
    "credits": [
        {"user": {"id": "2", "nickname": "coder"}, "role": "code"},
        {"user": {"id": "3", "nickname": "musician"}, "role": "music"},
    ],
    "addedUser": ANALOGUE,
}

GROUP = {
    "id": "20",
    "name": "The Black Lotus",
    "acronym": "TBL",
    "disambiguation": "",
    "web": "http://tbl.example",
    "addedDate": "2000-01-02 00:00:00",
    "addedUser": {"id": "4", "nickname": "groupie"},
    "csdb": "0",
    "zxdemo": "",
    "demozoo": "123",
}

PARTY = {
    "id": "10",
    "name": "The Party",
    "web": "http://theparty.example",
    "addedDate": "2000-01-03 00:00:00",
    "addedUser": {"id": "5", "nickname": "organizer"},
}

BOARD = {
    "id": "30",
    "name": "Dead Coders Society",
    "addedDate": "2000-01-04 00:00:00",
    "sysop": "Mr. Sysop",
    "phonenumber": "+1 555 0100",
    "platforms": {
        "3": {"name": "BeOS", "icon": "beos.gif", "slug": "beos"},
        "4": {"name": "Linux", "icon": "linux.gif", "slug": "linux"},
    },
    "addedUser": ANALOGUE,
}

RECORDS = {"prods": PROD, "groups": GROUP, "parties": PARTY, "boards": BOARD}


def records(entity: str) -> List[dict]:
    return [copy.deepcopy(RECORDS[entity])]


def encode_dump(data: List[dict]) -> bytes:
    return json.dumps({"data": data}).encode("utf-8")


def gz_dump(data: List[dict]) -> bytes:
    return gzip.compress(encode_dump(data))


def manifest_json(date: str = DATE) -> dict:
    return {
        "latest": {entity: {"url": url} for entity, url in DUMP_URLS.items()},
        "date": date,
    }


def make_dump_set(date: str = DATE, **overrides: List[dict]) -> DumpSet:
    """Validates raw records the way the decoder does and normalizes them."""
    parsed = {
        entity: [
            RECORD_TYPES[entity].model_validate(record)
            for record in overrides.get(entity, records(entity))
        ]
        for entity in ENTITIES
    }
    platforms, users = build_catalogs(
        parsed["prods"], parsed["groups"], parsed["parties"], parsed["boards"]
    )
    return DumpSet(date=date, platforms=platforms, users=users, **parsed)


class FakePouetServer:
    """A MockTransport handler serving canned responses by URL."""

    def __init__(self):
        self.routes: Dict[str, Callable[[], httpx.Response]] = {}
        self.requests: List[str] = []

    def reply(self, url: str, status: int = 200, content: bytes = b"",
              json_body: Optional[object] = None):
        if json_body is not None:
            self.routes[url] = lambda: httpx.Response(status, json=json_body)
        else:
            self.routes[url] = lambda: httpx.Response(status, content=content)

    def serve_latest(self, date: str = DATE):
        self.reply(MANIFEST_URL, json_body=manifest_json(date))
        for entity, url in DUMP_URLS.items():
            self.reply(url, content=gz_dump(records(entity)))

    def dump_requests(self) -> List[str]:
        return [url for url in self.requests if url != MANIFEST_URL]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        route = self.routes.get(url)
        if route is None:
            return httpx.Response(404)
        return route()
