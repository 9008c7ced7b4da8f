"""
Shared fixtures: canned piston-meta documents served through httpx.MockTransport.
"""
import hashlib
import io
import json
import zipfile
from typing import Callable, Dict, List, Tuple, Union

import httpx
import pytest

MANIFEST_URL = "https://piston.test/mc/game/version_manifest.json"
VERSION_URL = "https://piston.test/v1/packages/abc/1.20.1.json"
SNAPSHOT_URL = "https://piston.test/v1/packages/def/23w31a.json"
ASSET_INDEX_URL = "https://piston.test/v1/packages/ghi/5.json"
CLIENT_URL = "https://piston.test/v1/objects/aaa/client.jar"
SERVER_URL = "https://piston.test/v1/objects/bbb/server.jar"
MAPPINGS_URL = "https://piston.test/v1/objects/ccc/client.txt"
LIBRARY_URL = "https://libraries.test/com/mojang/logging/1.1.1/logging-1.1.1.jar"
WINDOWS_LIBRARY_URL = "https://libraries.test/org/lwjgl/lwjgl/3.3.1/lwjgl-3.3.1-natives-windows.jar"
LOG_CONFIG_URL = "https://piston.test/v1/objects/ddd/client-1.12.xml"
RESOURCES_URL = "https://resources.test"

Route = Union[bytes, Tuple[int, bytes], Callable[[httpx.Request], httpx.Response]]


def sha1(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


def build_jar() -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as jar:
        jar.writestr("META-INF/MANIFEST.MF", "Manifest-Version: 1.0\nMain-Class: net.minecraft.client.main.Main\n")
        jar.writestr("net/minecraft/client/main/Main.class", b"\xca\xfe\xba\xbe" + b"\x00" * 60)
        jar.writestr("assets/minecraft/lang/en_us.json", '{"menu.singleplayer": "Singleplayer"}')
        jar.writestr("version.json", '{"id": "1.20.1"}')
    return buffer.getvalue()


CLIENT_JAR = build_jar()
SERVER_JAR = b"server-jar-bytes" * 128
MAPPINGS = b"net.minecraft.client.Minecraft -> enn:\n" * 64
LIBRARY_JAR = b"library" * 300
WINDOWS_LIBRARY_JAR = b"natives" * 10
LOG_CONFIG = b'<?xml version="1.0" encoding="UTF-8"?><Configuration status="WARN"/>'
ASSET_ICON = b"\x89PNG icon"
ASSET_SOUND = b"OggS sound data"


def manifest_document() -> dict:
    return {
        "latest": {"release": "1.20.1", "snapshot": "23w31a"},
        "versions": [
            {
                "id": "23w31a",
                "type": "snapshot",
                "url": SNAPSHOT_URL,
                "time": "2023-08-01T11:03:27+00:00",
                "releaseTime": "2023-08-01T11:03:27+00:00",
            },
            {
                "id": "1.20.1",
                "type": "release",
                "url": VERSION_URL,
                "time": "2023-06-12T13:25:51+00:00",
                "releaseTime": "2023-06-12T13:25:51+00:00",
            },
            {
                "id": "b1.7.3",
                "type": "old_beta",
                "url": "https://piston.test/v1/packages/eee/b1.7.3.json",
                "time": "2011-07-07T22:00:00+00:00",
                "releaseTime": "2011-07-07T22:00:00+00:00",
            },
        ],
    }


def asset_index_document() -> dict:
    return {
        "objects": {
            "icons/icon_16x16.png": {"hash": sha1(ASSET_ICON), "size": len(ASSET_ICON)},
            "minecraft/sounds/ambient/cave/cave1.ogg": {"hash": sha1(ASSET_SOUND), "size": len(ASSET_SOUND)},
        }
    }


def descriptor_document() -> dict:
    index_body = json.dumps(asset_index_document()).encode()
    return {
        "arguments": {"game": ["--username", "${auth_player_name}"], "jvm": ["-cp", "${classpath}"]},
        "assetIndex": {
            "id": "5",
            "sha1": sha1(index_body),
            "size": len(index_body),
            "totalSize": len(ASSET_ICON) + len(ASSET_SOUND),
            "url": ASSET_INDEX_URL,
        },
        "assets": "5",
        "complianceLevel": 1,
        "downloads": {
            "client": {"sha1": sha1(CLIENT_JAR), "size": len(CLIENT_JAR), "url": CLIENT_URL},
            "client_mappings": {"sha1": sha1(MAPPINGS), "size": len(MAPPINGS), "url": MAPPINGS_URL},
            "server": {"sha1": sha1(SERVER_JAR), "size": len(SERVER_JAR), "url": SERVER_URL},
        },
        "id": "1.20.1",
        "javaVersion": {"component": "java-runtime-gamma", "majorVersion": 17},
        "libraries": [
            {
                "downloads": {
                    "artifact": {
                        "path": "com/mojang/logging/1.1.1/logging-1.1.1.jar",
                        "sha1": sha1(LIBRARY_JAR),
                        "size": len(LIBRARY_JAR),
                        "url": LIBRARY_URL,
                    }
                },
                "name": "com.mojang:logging:1.1.1",
            },
            {
                "downloads": {
                    "artifact": {
                        "path": "org/lwjgl/lwjgl/3.3.1/lwjgl-3.3.1-natives-windows.jar",
                        "sha1": sha1(WINDOWS_LIBRARY_JAR),
                        "size": len(WINDOWS_LIBRARY_JAR),
                        "url": WINDOWS_LIBRARY_URL,
                    }
                },
                "name": "org.lwjgl:lwjgl:3.3.1:natives-windows",
                "rules": [{"action": "allow", "os": {"name": "windows"}}],
            },
        ],
        "logging": {
            "client": {
                "argument": "-Dlog4j.configurationFile=${path}",
                "file": {
                    "id": "client-1.12.xml",
                    "sha1": sha1(LOG_CONFIG),
                    "size": len(LOG_CONFIG),
                    "url": LOG_CONFIG_URL,
                },
                "type": "log4j2-xml",
            }
        },
        "mainClass": "net.minecraft.client.main.Main",
        "minimumLauncherVersion": 21,
        "releaseTime": "2023-06-12T13:25:51+00:00",
        "time": "2023-06-12T13:25:51+00:00",
        "type": "release",
    }


def asset_url(data: bytes) -> str:
    digest = sha1(data)
    return f"{RESOURCES_URL}/{digest[:2]}/{digest}"


class PistonRoutes:
    """URL -> response table backing a MockTransport, with a log of requested URLs."""

    def __init__(self):
        self.routes: Dict[str, Route] = {
            MANIFEST_URL: json.dumps(manifest_document()).encode(),
            VERSION_URL: json.dumps(descriptor_document()).encode(),
            ASSET_INDEX_URL: json.dumps(asset_index_document()).encode(),
            CLIENT_URL: CLIENT_JAR,
            SERVER_URL: SERVER_JAR,
            MAPPINGS_URL: MAPPINGS,
            LIBRARY_URL: LIBRARY_JAR,
            WINDOWS_LIBRARY_URL: WINDOWS_LIBRARY_JAR,
            LOG_CONFIG_URL: LOG_CONFIG,
            asset_url(ASSET_ICON): ASSET_ICON,
            asset_url(ASSET_SOUND): ASSET_SOUND,
        }
        self.requested: List[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requested.append(url)
        route = self.routes.get(url)
        if route is None:
            return httpx.Response(404, content=b"not found")
        if callable(route):
            return route(request)
        if isinstance(route, tuple):
            status, body = route
            return httpx.Response(status, content=body)
        return httpx.Response(200, content=route)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport)


@pytest.fixture
def piston_routes() -> PistonRoutes:
    return PistonRoutes()


@pytest.fixture
def settings(tmp_path):
    from piston.config import Settings

    return Settings(
        manifest_url=MANIFEST_URL,
        resources_url=RESOURCES_URL,
        http_timeout=5.0,
        download_dir=str(tmp_path / "versions"),
    )
