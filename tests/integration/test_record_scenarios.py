"""End-to-end record scenarios against the fake Data API.

Each test creates a record, then edits or re-creates it with a given mix of
merge and script options and checks the exact key set of the result.
"""

from __future__ import annotations

import asyncio

import pytest

from fmdata.core.errors import ServerError

LAYOUT = "Heroes"
SCRIPT = "FMS Triggered Script"
HAN = {
    "name": "Han Solo",
    "array": ["ben"],
    "object": {"co-pilot": "chewbacca"},
    "height": 52,
}
SCRIPT_KEYS = {"scriptResult", "scriptError"}
PREREQUEST_KEYS = {"scriptResult.prerequest", "scriptError.prerequest"}


class TestEdit:
    @pytest.mark.asyncio
    async def test_edit_returns_mod_id_only(self, client):
        created = await client.create(LAYOUT, {"name": "Obi-Wan"})
        result = await client.edit(LAYOUT, created["recordId"], {"name": "Luke Skywalker"})
        assert isinstance(result, dict)
        assert set(result) == {"modId"}

    @pytest.mark.asyncio
    async def test_edit_rejects_bad_data(self, client):
        created = await client.create(LAYOUT, {"name": "Obi-Wan"})
        with pytest.raises(ServerError) as info:
            await client.edit(LAYOUT, created["recordId"], "junk error")
        assert set(info.value.to_failure()) == {"code", "message"}

    @pytest.mark.asyncio
    async def test_edit_merge(self, client):
        created = await client.create(LAYOUT, {"name": "Obi-Wan"})
        result = await client.edit(LAYOUT, created["recordId"], {"name": "Luke Skywalker"}, {"merge": True})
        assert set(result) == {"modId", "recordId", "name"}
        assert result["recordId"] == created["recordId"]
        assert result["name"] == "Luke Skywalker"

    @pytest.mark.asyncio
    async def test_edit_with_script(self, client):
        created = await client.create(LAYOUT, {"name": "Obi-Wan"})
        result = await client.edit(LAYOUT, created["recordId"], {"name": "Han Solo"}, {"script": SCRIPT})
        assert set(result) == {"modId"} | SCRIPT_KEYS

    @pytest.mark.asyncio
    async def test_edit_with_scripts_array(self, client):
        created = await client.create(LAYOUT, {"name": "Obi-Wan"})
        result = await client.edit(
            LAYOUT,
            created["recordId"],
            {"name": "Han Solo"},
            {
                "scripts": [
                    {"name": SCRIPT, "param": "data"},
                    {"name": SCRIPT, "phase": "prerequest", "param": {"data": 2}},
                ]
            },
        )
        assert set(result) == {"modId"} | SCRIPT_KEYS | PREREQUEST_KEYS
        assert result["scriptResult"] == "data"
        assert result["scriptResult.prerequest"] == '{"data": 2}'


class TestCreate:
    @pytest.mark.asyncio
    async def test_create_with_scripts_array(self, client):
        result = await client.create(
            LAYOUT,
            HAN,
            {
                "scripts": [
                    {"name": SCRIPT, "param": "data"},
                    {"name": SCRIPT, "phase": "prerequest", "param": {"data": 2}},
                ]
            },
        )
        assert set(result) == {"recordId", "modId"} | SCRIPT_KEYS | PREREQUEST_KEYS

    @pytest.mark.asyncio
    async def test_create_scripts_array_with_merge(self, client):
        result = await client.create(
            LAYOUT,
            HAN,
            {"script": SCRIPT, "merge": True, "scripts": [{"name": SCRIPT, "phase": "prerequest"}]},
        )
        assert set(result) == {"recordId", "modId"} | set(HAN) | SCRIPT_KEYS | PREREQUEST_KEYS

    @pytest.mark.asyncio
    async def test_create_sanitizes_parameters(self, client, fake_api):
        result = await client.create(
            LAYOUT,
            HAN,
            {
                "script": SCRIPT,
                "script.param": 1,
                "merge": True,
                "scripts": [{"name": SCRIPT, "param": {"data": True}, "phase": "prerequest"}],
            },
        )
        assert set(result) == {"recordId", "modId"} | set(HAN) | SCRIPT_KEYS | PREREQUEST_KEYS
        for option in ("merge", "script", "script.param", "scripts"):
            assert option not in result
        assert set(fake_api.last_body()["fieldData"]) == set(HAN)

    @pytest.mark.asyncio
    async def test_create_default_script_and_scripts_array(self, client):
        result = await client.create(
            LAYOUT,
            HAN,
            {
                "script": SCRIPT,
                "script.param": 1,
                "merge": True,
                "scripts": [{"name": SCRIPT, "phase": "prerequest", "param": 2}],
            },
        )
        assert set(result) == {"recordId", "modId"} | set(HAN) | SCRIPT_KEYS | PREREQUEST_KEYS
        assert result["scriptResult"] == "1"
        assert result["scriptResult.prerequest"] == "2"
        assert result["object"] == {"co-pilot": "chewbacca"}


class TestIndependentCalls:
    @pytest.mark.asyncio
    async def test_concurrent_creates_share_one_session(self, client, fake_api):
        results = await asyncio.gather(*(client.create(LAYOUT, {"name": f"Clone {n}"}) for n in range(5)))
        assert sorted(r["recordId"] for r in results) == ["1", "2", "3", "4", "5"]
        assert fake_api.logins == 1
