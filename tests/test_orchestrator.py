import pytest
import asyncio
import os
import sys
from unittest.mock import MagicMock, AsyncMock

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pipeline.registry import load_registry
from pipeline.errors import InvalidRequest, ConfigurationError, UpstreamError
from pipeline.nodes.classify import ChainExclusionFilter, WebsiteStatusFilter
from pipeline.nodes.validate import validate_query
from pipeline.orchestrator import SearchOrchestrator

REGISTRY = load_registry()

def make_orchestrator(places, lead_filter_cls=ChainExclusionFilter):
    client = MagicMock()
    client.search_text = AsyncMock(return_value=places)
    return SearchOrchestrator(client, lead_filter_cls(REGISTRY)), client

class TestValidateQuery:
    """Search parameter validation."""

    def test_builds_query(self):
        assert validate_query("鎌倉", "カフェ") == "鎌倉 カフェ"

    @pytest.mark.parametrize("area,category", [(None, "カフェ"), ("鎌倉", None), ("", "カフェ"), ("鎌倉", "")])
    def test_missing_parameter(self, area, category):
        with pytest.raises(InvalidRequest):
            validate_query(area, category)

class TestSearchOrchestrator:
    """End-to-end search over a mocked provider."""

    def setup_method(self):
        self.starbucks = {
            "id": "p1",
            "name": "スターバックス鎌倉店",
            "address": "神奈川県鎌倉市小町1-1",
            "primary_type": "cafe",
            "website_uri": None,
        }
        self.original = {
            "id": "p2",
            "name": "カフェ・オリジナル",
            "address": "神奈川県鎌倉市長谷2-2",
            "primary_type": "cafe",
            "website_uri": "https://original-cafe.example.jp",
            "latitude": 35.31,
            "longitude": 139.53,
        }
        self.instagram_only = {
            "id": "p3",
            "name": "喫茶 しおかぜ",
            "address": "神奈川県鎌倉市由比ガ浜3-3",
            "primary_type": "coffee_shop",
            "website_uri": "https://instagram.com/mycafe",
        }

    def test_chain_exclusion_scenario(self):
        orchestrator, client = make_orchestrator([self.starbucks, self.original])

        leads = asyncio.run(orchestrator.search("鎌倉", "カフェ"))

        assert [lead["name"] for lead in leads] == ["カフェ・オリジナル"]
        assert leads[0]["websiteUri"] == "https://original-cafe.example.jp"
        assert leads[0]["lat"] == 35.31
        client.search_text.assert_awaited_once_with(
            "鎌倉 カフェ", ChainExclusionFilter(REGISTRY).field_mask
        )

    def test_website_status_scenario(self):
        orchestrator, client = make_orchestrator([self.original, self.instagram_only], WebsiteStatusFilter)

        leads = asyncio.run(orchestrator.search("鎌倉", "カフェ"))

        assert len(leads) == 1
        assert leads[0]["id"] == "p3"
        assert leads[0]["status"] == "SNS Only"
        assert "places.location" not in client.search_text.await_args.args[1]

    def test_website_status_keeps_chain_without_website(self):
        """The status policy does not apply chain exclusion."""
        orchestrator, _ = make_orchestrator([self.starbucks], WebsiteStatusFilter)

        leads = asyncio.run(orchestrator.search("鎌倉", "カフェ"))

        assert leads[0]["status"] == "No Website"

    def test_provider_order_is_preserved(self):
        places = [dict(self.original, id=f"p{i}", name=f"喫茶 {i}") for i in range(5)]
        orchestrator, _ = make_orchestrator(places)

        leads = asyncio.run(orchestrator.search("鎌倉", "カフェ"))

        assert [lead["id"] for lead in leads] == ["p0", "p1", "p2", "p3", "p4"]

    def test_category_is_echoed_verbatim(self):
        orchestrator, _ = make_orchestrator([self.original])

        leads = asyncio.run(orchestrator.search("鎌倉", "喫茶店"))

        assert leads[0]["category"] == "喫茶店"

    def test_zero_results(self):
        orchestrator, _ = make_orchestrator([])
        assert asyncio.run(orchestrator.search("鎌倉", "カフェ")) == []

    def test_invalid_request_skips_provider(self):
        orchestrator, client = make_orchestrator([self.original])

        with pytest.raises(InvalidRequest):
            asyncio.run(orchestrator.search("", "カフェ"))

        assert client.search_text.await_count == 0

    def test_provider_errors_propagate(self):
        for error in (ConfigurationError(), UpstreamError("boom")):
            orchestrator, client = make_orchestrator([])
            client.search_text.side_effect = error

            with pytest.raises(type(error)):
                asyncio.run(orchestrator.search("鎌倉", "カフェ"))

    def test_repeated_search_is_stable(self):
        orchestrator, _ = make_orchestrator([self.starbucks, self.original, self.instagram_only])

        first = asyncio.run(orchestrator.search("鎌倉", "カフェ"))
        second = asyncio.run(orchestrator.search("鎌倉", "カフェ"))

        assert first == second
