"""
HTTP tests for the product routes, run in-process through httpx.ASGITransport.
"""
import httpx
import pytest
from sqlalchemy import insert

from catalog.api.dependencies import get_media_store, get_orphan_sink
from catalog.database import get_db
from catalog.main import app
from catalog.models.product import Product

FORM = {
    "categoryName": "Electronics",
    "subCategoryName": "Audio",
    "title": "Studio Headphones",
    "shortDescription": "Closed back,40mm drivers",
    "bulletPoints": "Foldable,Carry pouch",
    "brand": "Acme",
    "brandImage": "https://cdn.example.com/brands/acme.png",
    "modelNumber": "ACM-100",
    "price": "100",
    "discount": "20",
}


def upload_files(images=2, thumbnail=True):
    files = []
    if thumbnail:
        files.append(("thumbnailImage", ("thumb.jpg", b"thumb-bytes", "image/jpeg")))
    for i in range(images):
        files.append(("images", (f"image{i}.jpg", f"image-{i}".encode(), "image/jpeg")))
    return files


@pytest.fixture
async def client(session_factory, media_store, orphans):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_media_store] = lambda: media_store
    app.dependency_overrides[get_orphan_sink] = lambda: orphans.append

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


async def add_product(client, **overrides):
    response = await client.post("/api/products/add", data={**FORM, **overrides}, files=upload_files())
    assert response.status_code == 201, response.text
    return response.json()


class TestProductRoutes:
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.json() == {"status": "healthy"}

    async def test_add_product(self, client):
        product = await add_product(client)

        assert product["productId"] == "productid0001"
        assert product["active"] is False
        assert product["isDraft"] is False
        assert product["offerPrice"] == "80"
        assert product["shortDescription"] == ["Closed back", "40mm drivers"]
        assert len(product["images"]) == 2
        assert product["thumbnailImage"].endswith("img001.jpg")

    async def test_add_without_thumbnail_is_bad_request(self, client, media_store):
        response = await client.post("/api/products/add", data=FORM, files=upload_files(thumbnail=False))

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
        assert media_store.calls == []

    async def test_add_with_media_failure_is_bad_gateway(self, client, media_store):
        media_store.fail_upload_at = 0

        response = await client.post("/api/products/add", data=FORM, files=upload_files())

        assert response.status_code == 502
        assert response.json()["code"] == "MEDIA_ERROR"

    async def test_add_with_malformed_stored_id_is_server_error(self, client, session):
        await session.execute(
            insert(Product).values(
                product_id="broken",
                category_name="Electronics",
                images=[],
                thumbnail_image="https://cdn.example.com/t.jpg",
                title="Broken",
                short_description=[],
                bullet_points=[],
                brand="Acme",
                brand_image="https://cdn.example.com/b.png",
                model_number="BROKEN-1",
                price="1",
                active=False,
                is_draft=False,
            )
        )
        await session.commit()

        response = await client.post("/api/products/add", data=FORM, files=upload_files())

        assert response.status_code == 500
        assert response.json()["code"] == "DATA_INTEGRITY_ERROR"

    async def test_list_all(self, client):
        await add_product(client)
        await add_product(client, modelNumber="ACM-200")

        response = await client.get("/api/products/all")

        assert response.status_code == 200
        assert [p["productId"] for p in response.json()] == ["productid0001", "productid0002"]

    async def test_get_by_id(self, client):
        await add_product(client)

        response = await client.get("/api/products/productid0001")

        assert response.status_code == 200
        assert response.json()["modelNumber"] == "ACM-100"

    async def test_get_missing_is_not_found(self, client):
        response = await client.get("/api/products/productid0404")

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    async def test_toggle_active(self, client):
        await add_product(client)

        first = await client.put("/api/products/toggle-active/productid0001")
        second = await client.put("/api/products/toggle-active/productid0001")

        assert first.json()["active"] is True
        assert second.json()["active"] is False

    async def test_category_filters(self, client):
        await add_product(client)
        await add_product(client, modelNumber="ACM-200", subCategoryName="Video")

        by_category = await client.get("/api/products/category/Electronics")
        by_sub = await client.get("/api/products/category/Electronics/subcategory/Video")
        empty_category = await client.get("/api/products/category/Garden")

        assert len(by_category.json()) == 2
        assert [p["modelNumber"] for p in by_sub.json()] == ["ACM-200"]
        assert empty_category.status_code == 200
        assert empty_category.json() == []

    async def test_subcategory_without_matches_is_not_found(self, client):
        await add_product(client)

        response = await client.get("/api/products/category/Electronics/subcategory/Cameras")

        assert response.status_code == 404

    async def test_update_fields_only(self, client, media_store):
        created = await add_product(client)
        media_store.reset()

        response = await client.put("/api/products/update/productid0001", data={"title": "Renamed", "discount": "50"})

        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Renamed"
        assert body["offerPrice"] == "50"
        assert body["images"] == created["images"]
        assert media_store.calls == []

    async def test_update_with_new_images(self, client, media_store):
        await add_product(client)
        media_store.reset()

        response = await client.put(
            "/api/products/update/productid0001",
            data={"title": "Renamed"},
            files=upload_files(images=1, thumbnail=False),
        )

        assert response.status_code == 200
        assert media_store.calls[:2] == [("delete", "img002"), ("delete", "img003")]
        assert len(response.json()["images"]) == 1

    async def test_update_missing_is_not_found(self, client):
        response = await client.put("/api/products/update/productid0404", data={"title": "x"})
        assert response.status_code == 404

    async def test_delete(self, client, media_store):
        await add_product(client)
        media_store.reset()

        response = await client.delete("/api/products/delete/productid0001")

        assert response.status_code == 200
        assert response.json()["message"] == "Product deleted successfully"
        assert media_store.calls == [("delete", "img002"), ("delete", "img003")]
        assert (await client.get("/api/products/productid0001")).status_code == 404

    async def test_delete_missing_is_not_found(self, client):
        response = await client.delete("/api/products/delete/productid0404")
        assert response.status_code == 404
