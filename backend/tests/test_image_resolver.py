"""
Tests for ImageResolver.

Remote downloads are intercepted with respx; nothing leaves the process.
Every failure mode must come back as an ImageResult, never an exception.
"""

import httpx
import pytest
import respx

from pokedex.services.image_resolver import ImageOutcome, ImageResolver, ImageSource

IMAGE_URL = "https://images.example.com/bulbasaur.png"
PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image"


@pytest.fixture
def resolver(tmp_path):
    return ImageResolver(
        assets_root=str(tmp_path / "assets"),
        public_base_url="http://localhost:3000/",
        fetch_timeout=2.0,
        user_agent="Mozilla/5.0",
    )


class TestImageSource:

    def test_http_reference_is_a_url(self):
        source = ImageSource.from_request("http://host/a.png")
        assert source.remote_url == "http://host/a.png"
        assert source.kind == "url"

    def test_other_reference_is_a_path(self):
        source = ImageSource.from_request("./local/a.png")
        assert source.local_path == "./local/a.png"
        assert source.kind == "path"

    def test_upload_takes_priority(self):
        source = ImageSource.from_request("http://host/a.png", upload=PNG_BYTES)
        assert source.kind == "upload"

    def test_nothing_given(self):
        assert ImageSource.from_request(None).kind == "none"


class TestPublicUrl:

    def test_url_is_deterministic(self, resolver):
        assert resolver.public_url(7) == "http://localhost:3000/assets/pokemons/7.png"
        assert resolver.asset_path(7).name == "7.png"


class TestResolve:

    @pytest.mark.asyncio
    async def test_upload_is_stored(self, resolver):
        result = await resolver.resolve(1, ImageSource(upload=PNG_BYTES))

        assert result.outcome is ImageOutcome.STORED
        assert resolver.asset_path(1).read_bytes() == PNG_BYTES

    @pytest.mark.asyncio
    async def test_asset_dir_is_created_with_parents(self, resolver):
        assert not resolver.asset_dir.exists()

        await resolver.resolve(1, ImageSource(upload=PNG_BYTES))

        assert resolver.asset_dir.is_dir()

    @pytest.mark.asyncio
    @respx.mock
    async def test_remote_url_is_downloaded(self, resolver):
        route = respx.get(IMAGE_URL).mock(return_value=httpx.Response(200, content=PNG_BYTES))

        result = await resolver.resolve(2, ImageSource(remote_url=IMAGE_URL))

        assert result.outcome is ImageOutcome.STORED
        assert resolver.asset_path(2).read_bytes() == PNG_BYTES
        assert route.calls.last.request.headers["User-Agent"] == "Mozilla/5.0"

    @pytest.mark.asyncio
    @respx.mock
    async def test_non_2xx_response_fails_without_file(self, resolver):
        respx.get(IMAGE_URL).mock(return_value=httpx.Response(404))

        result = await resolver.resolve(3, ImageSource(remote_url=IMAGE_URL))

        assert result.outcome is ImageOutcome.FAILED
        assert not resolver.asset_path(3).exists()

    @pytest.mark.asyncio
    @respx.mock
    async def test_unreachable_host_fails_without_file(self, resolver):
        respx.get(IMAGE_URL).mock(side_effect=httpx.ConnectError("connection refused"))

        result = await resolver.resolve(4, ImageSource(remote_url=IMAGE_URL))

        assert result.outcome is ImageOutcome.FAILED
        assert "ConnectError" in result.detail
        assert not resolver.asset_path(4).exists()

    @pytest.mark.asyncio
    @respx.mock
    async def test_timeout_fails_without_file(self, resolver):
        respx.get(IMAGE_URL).mock(side_effect=httpx.ReadTimeout("timed out"))

        result = await resolver.resolve(5, ImageSource(remote_url=IMAGE_URL))

        assert result.outcome is ImageOutcome.FAILED
        assert not resolver.asset_path(5).exists()

    @pytest.mark.asyncio
    async def test_local_path_is_copied(self, resolver, tmp_path):
        local = tmp_path / "source.png"
        local.write_bytes(PNG_BYTES)

        result = await resolver.resolve(6, ImageSource(local_path=str(local)))

        assert result.outcome is ImageOutcome.STORED
        assert resolver.asset_path(6).read_bytes() == PNG_BYTES

    @pytest.mark.asyncio
    async def test_missing_local_path_is_skipped(self, resolver, tmp_path):
        result = await resolver.resolve(7, ImageSource(local_path=str(tmp_path / "nope.png")))

        assert result.outcome is ImageOutcome.SKIPPED
        assert not resolver.asset_path(7).exists()

    @pytest.mark.asyncio
    async def test_no_source_is_skipped(self, resolver):
        result = await resolver.resolve(8, ImageSource())

        assert result.outcome is ImageOutcome.SKIPPED

    @pytest.mark.asyncio
    async def test_existing_file_is_overwritten(self, resolver):
        await resolver.resolve(9, ImageSource(upload=b"old"))
        await resolver.resolve(9, ImageSource(upload=b"new"))

        assert resolver.asset_path(9).read_bytes() == b"new"
