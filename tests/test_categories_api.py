from botocore.exceptions import ClientError

from app.db.models import Product

MISSING_ID = "0123456789abcdef01234567"


class TestCreateCategory:
    """Tests for POST /api/categories."""

    def test_create_derives_slug(self, client):
        response = client.post(
            "/api/categories", data={"name": "Gold Rings", "description": "Solid gold"}
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Category created successfully"
        assert body["data"]["slug"] == "gold-rings"
        assert body["data"]["description"] == "Solid gold"
        assert body["data"]["isActive"] is True
        assert body["data"]["parentId"] is None
        assert body["data"]["image"] is None
        assert len(body["data"]["id"]) == 24

    def test_name_required(self, client):
        response = client.post("/api/categories", data={"description": "no name"})

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Category name is required"}

    def test_duplicate_name_rejected(self, client, create_category):
        create_category("Gold Rings")

        response = client.post("/api/categories", data={"name": "Gold Rings"})

        assert response.status_code == 400
        assert "already exists" in response.json()["message"]

    def test_name_with_same_slug_rejected(self, client, create_category):
        create_category("Gold Rings")

        for name in ("gold rings", "Gold  Rings!"):
            response = client.post("/api/categories", data={"name": name})

            assert response.status_code == 400
            assert response.json()["message"] == "Category with this name already exists"
        assert client.get("/api/categories").json()["count"] == 1

    def test_create_from_json_body(self, client, create_category):
        parent = create_category("Rings")

        root = client.post(
            "/api/categories", json={"name": "Earrings", "isActive": False, "parentId": ""}
        )
        child = client.post(
            "/api/categories", json={"name": "Gold Rings", "description": "", "parentId": parent["id"]}
        )

        assert root.status_code == 201
        assert root.json()["data"]["slug"] == "earrings"
        assert root.json()["data"]["isActive"] is False
        assert root.json()["data"]["parentId"] is None
        assert child.status_code == 201
        assert child.json()["data"]["parentId"] == parent["id"]

    def test_parent_must_exist(self, client):
        malformed = client.post("/api/categories", data={"name": "A", "parentId": "nope"})
        missing = client.post("/api/categories", data={"name": "B", "parentId": MISSING_ID})

        assert malformed.status_code == 400
        assert malformed.json()["message"] == "Invalid parent category ID format"
        assert missing.status_code == 400
        assert missing.json()["message"] == "Parent category not found"

    def test_create_with_parent(self, create_category):
        parent = create_category("Rings")

        child = create_category("Gold Rings", parentId=parent["id"])

        assert child["parentId"] == parent["id"]

    def test_create_with_image(self, client, s3_client, make_image):
        response = client.post(
            "/api/categories",
            data={"name": "Necklaces"},
            files={"image": ("necklace.png", make_image(), "image/png")},
        )

        assert response.status_code == 201
        image = response.json()["data"]["image"]
        assert image["url"].startswith("https://cdn.test/jewelry/categories/")
        assert image["publicId"].startswith("jewelry/categories/")
        assert image["altText"] == "Necklaces"
        s3_client.put_object.assert_called_once()

    def test_image_upload_failure_is_500(self, client, s3_client, make_image):
        s3_client.put_object.side_effect = ClientError(
            {"Error": {"Code": "503", "Message": "down"}}, "PutObject"
        )

        response = client.post(
            "/api/categories",
            data={"name": "Necklaces"},
            files={"image": ("necklace.png", make_image(), "image/png")},
        )

        assert response.status_code == 500
        assert response.json()["message"] == "Image upload failed"
        assert client.get("/api/categories").json()["count"] == 0

    def test_unsupported_image_format(self, client):
        response = client.post(
            "/api/categories",
            data={"name": "Necklaces"},
            files={"image": ("necklace.txt", b"hello", "text/plain")},
        )

        assert response.status_code == 400
        assert "Unsupported file format" in response.json()["message"]


class TestReadCategories:
    """Tests for list, tree and single category lookups."""

    def test_list_sorted_by_name_with_count(self, client, create_category):
        create_category("Rings")
        create_category("Earrings")
        create_category("Necklaces", isActive="false")

        body = client.get("/api/categories").json()

        assert body["count"] == 3
        assert [c["name"] for c in body["data"]] == ["Earrings", "Necklaces", "Rings"]

    def test_list_active_filter(self, client, create_category):
        create_category("Rings")
        create_category("Necklaces", isActive="false")

        active = client.get("/api/categories", params={"isActive": "true"}).json()
        inactive = client.get("/api/categories", params={"isActive": "false"}).json()
        ignored = client.get("/api/categories", params={"isActive": "maybe"}).json()

        assert [c["name"] for c in active["data"]] == ["Rings"]
        assert [c["name"] for c in inactive["data"]] == ["Necklaces"]
        assert ignored["count"] == 2

    def test_tree(self, client, create_category):
        rings = create_category("Rings")
        create_category("Silver Rings", parentId=rings["id"])
        gold = create_category("Gold Rings", parentId=rings["id"])
        create_category("White Gold", parentId=gold["id"])
        create_category("Earrings")
        create_category("Hidden", isActive="false")

        body = client.get("/api/categories/tree").json()

        assert body["count"] == 2
        assert [node["name"] for node in body["data"]] == ["Earrings", "Rings"]
        assert "children" not in body["data"][0]
        children = body["data"][1]["children"]
        assert [node["name"] for node in children] == ["Gold Rings", "Silver Rings"]
        assert children[0]["children"][0]["slug"] == "white-gold"

    def test_get_by_id(self, client, create_category):
        category = create_category("Rings")

        response = client.get(f"/api/categories/{category['id']}")

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Rings"

    def test_get_by_id_errors(self, client):
        malformed = client.get("/api/categories/not-an-id")
        missing = client.get(f"/api/categories/{MISSING_ID}")

        assert malformed.status_code == 400
        assert malformed.json()["message"] == "Invalid category ID format"
        assert missing.status_code == 404
        assert missing.json()["message"] == "Category not found"

    def test_get_by_slug(self, client, create_category):
        create_category("Gold Rings")

        found = client.get("/api/categories/slug/gold-rings")
        missing = client.get("/api/categories/slug/silver-rings")

        assert found.json()["data"]["name"] == "Gold Rings"
        assert missing.status_code == 404


class TestUpdateCategory:
    """Tests for PUT /api/categories/{id}."""

    def test_rename_updates_slug(self, client, create_category):
        category = create_category("Gold Rings")

        response = client.put(f"/api/categories/{category['id']}", data={"name": "Rose Gold Rings"})

        assert response.status_code == 200
        assert response.json()["message"] == "Category updated successfully"
        assert response.json()["data"]["slug"] == "rose-gold-rings"

    def test_partial_update_keeps_other_fields(self, client, create_category):
        category = create_category("Gold Rings", description="Old")

        data = client.put(
            f"/api/categories/{category['id']}", data={"description": "New"}
        ).json()["data"]

        assert data["name"] == "Gold Rings"
        assert data["slug"] == "gold-rings"
        assert data["description"] == "New"
        assert data["isActive"] is True

    def test_rename_to_existing_name(self, client, create_category):
        create_category("Rings")
        other = create_category("Earrings")

        response = client.put(f"/api/categories/{other['id']}", data={"name": "Rings"})

        assert response.status_code == 400

    def test_rename_to_colliding_slug(self, client, create_category):
        create_category("Gold Rings")
        other = create_category("Earrings")

        collision = client.put(f"/api/categories/{other['id']}", data={"name": "GOLD RINGS"})
        own_case = client.put(f"/api/categories/{other['id']}", data={"name": "EARRINGS"})

        assert collision.status_code == 400
        assert collision.json()["message"] == "Category with this name already exists"
        assert own_case.status_code == 200
        assert own_case.json()["data"]["slug"] == "earrings"

    def test_empty_parent_makes_root(self, client, create_category):
        parent = create_category("Rings")
        child = create_category("Gold Rings", parentId=parent["id"])

        data = client.put(f"/api/categories/{child['id']}", data={"parentId": ""}).json()["data"]

        assert data["parentId"] is None

    def test_cannot_be_own_parent(self, client, create_category):
        category = create_category("Rings")

        response = client.put(
            f"/api/categories/{category['id']}", data={"parentId": category["id"]}
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Category cannot be its own parent"

    def test_replace_image_deletes_old(self, client, s3_client, make_image):
        created = client.post(
            "/api/categories",
            data={"name": "Rings"},
            files={"image": ("a.png", make_image(), "image/png")},
        ).json()["data"]
        old_key = created["image"]["publicId"]

        response = client.put(
            f"/api/categories/{created['id']}",
            data={"description": "with new image"},
            files={"image": ("b.png", make_image(), "image/png")},
        )

        assert response.status_code == 200
        assert response.json()["data"]["image"]["publicId"] != old_key
        s3_client.delete_object.assert_called_once_with(Bucket="test-bucket", Key=old_key)

    def test_remove_image(self, client, s3_client, make_image):
        created = client.post(
            "/api/categories",
            data={"name": "Rings"},
            files={"image": ("a.png", make_image(), "image/png")},
        ).json()["data"]

        data = client.put(
            f"/api/categories/{created['id']}", data={"removeImage": "true"}
        ).json()["data"]

        assert data["image"] is None
        s3_client.delete_object.assert_called_once()

    def test_update_from_json_body(self, client, s3_client, make_image, create_category):
        parent = create_category("Rings")
        created = client.post(
            "/api/categories",
            data={"name": "Gold Rings", "parentId": parent["id"]},
            files={"image": ("a.png", make_image(), "image/png")},
        ).json()["data"]

        response = client.put(
            f"/api/categories/{created['id']}",
            json={"description": "Solid gold", "parentId": "", "image": None},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Gold Rings"
        assert data["description"] == "Solid gold"
        assert data["parentId"] is None
        assert data["image"] is None
        s3_client.delete_object.assert_called_once()


class TestDeleteCategory:
    """Tests for DELETE /api/categories/{id}."""

    def test_delete_leaf(self, client, create_category):
        category = create_category("Rings")

        response = client.delete(f"/api/categories/{category['id']}")

        assert response.status_code == 200
        assert response.json()["message"] == "Category deleted successfully"
        assert client.get(f"/api/categories/{category['id']}").status_code == 404

    def test_delete_with_children_rejected(self, client, create_category):
        parent = create_category("Rings")
        create_category("Gold Rings", parentId=parent["id"])

        response = client.delete(f"/api/categories/{parent['id']}")

        assert response.status_code == 400
        assert "subcategories" in response.json()["message"]

    def test_delete_detaches_products(self, client, db_session, create_category, create_product):
        category = create_category("Rings")
        product = create_product("Ring A", categoryId=category["id"])

        client.delete(f"/api/categories/{category['id']}")

        assert db_session.get(Product, product["id"]).category_id is None

    def test_delete_missing(self, client):
        assert client.delete(f"/api/categories/{MISSING_ID}").status_code == 404


def test_catalog_walkthrough(client, create_category):
    """Category, duplicate rejection, product with snapshot, filtered listing."""
    category = create_category("Gold Rings")
    assert category["slug"] == "gold-rings"

    duplicate = client.post("/api/categories", data={"name": "Gold Rings"})
    assert duplicate.status_code == 400
    assert "already exists" in duplicate.json()["message"]

    created = client.post(
        "/api/products",
        data={"name": "Ring A", "price": "150", "sku": "R-001", "categoryId": category["id"]},
    )
    assert created.status_code == 201
    product = created.json()["data"]
    assert product["slug"] == "ring-a"
    assert product["category"] == {"id": category["id"], "name": "Gold Rings", "slug": "gold-rings"}

    listing = client.get(
        "/api/products",
        params={"categoryId": category["id"], "minPrice": 100, "maxPrice": 200},
    ).json()["data"]
    assert listing["total"] == 1
    assert [p["name"] for p in listing["products"]] == ["Ring A"]
