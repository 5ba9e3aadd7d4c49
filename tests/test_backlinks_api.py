async def test_create_backlink(client, make_website, make_resource):
    website = await make_website()
    resource = await make_resource()

    response = await client.post("/api/backlinks", json={
        "website_id": website["id"],
        "resource_id": resource["id"],
        "anchor_text": "best saas",
        "target_url": "https://a.com/pricing",
        "placement_date": "2024-05-01"
    })
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "pending"
    assert data["anchor_text"] == "best saas"
    assert data["placement_date"] == "2024-05-01"


async def test_create_backlink_pair_is_unique(client, make_website, make_resource, make_backlink):
    website = await make_website()
    resource = await make_resource()
    await make_backlink(website["id"], resource["id"])

    response = await client.post("/api/backlinks", json={
        "website_id": website["id"],
        "resource_id": resource["id"]
    })
    assert response.status_code == 409
    assert response.json()["message"] == "A backlink for this website and resource already exists"


async def test_create_backlink_invalid_status(client, make_website, make_resource):
    website = await make_website()
    resource = await make_resource()

    response = await client.post("/api/backlinks", json={
        "website_id": website["id"],
        "resource_id": resource["id"],
        "status": "done"
    })
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid status value"


async def test_create_backlink_for_deleted_website(client, make_website, make_resource):
    website = await make_website()
    resource = await make_resource()
    await client.delete(f"/api/websites/{website['id']}")

    response = await client.post("/api/backlinks", json={
        "website_id": website["id"],
        "resource_id": resource["id"]
    })
    assert response.status_code == 404
    assert response.json()["message"] == "Website not found"


async def test_update_backlink(client, make_website, make_resource, make_backlink):
    website = await make_website()
    resource = await make_resource()
    backlink = await make_backlink(website["id"], resource["id"])

    response = await client.patch(f"/api/backlinks/{backlink['id']}", json={
        "status": "live",
        "notes": "confirmed"
    })
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Backlink updated successfully"
    assert body["data"]["status"] == "live"
    assert body["data"]["notes"] == "confirmed"

    fetched = (await client.get(f"/api/backlinks/{backlink['id']}")).json()["data"]
    assert fetched["status"] == "live"


async def test_update_backlink_invalid_status(client, make_website, make_resource, make_backlink):
    website = await make_website()
    resource = await make_resource()
    backlink = await make_backlink(website["id"], resource["id"])

    response = await client.patch(f"/api/backlinks/{backlink['id']}", json={"status": "finished"})
    assert response.status_code == 400
    assert response.json()["success"] is False

    fetched = (await client.get(f"/api/backlinks/{backlink['id']}")).json()["data"]
    assert fetched["status"] == "pending"


async def test_update_backlink_without_fields(client, make_website, make_resource, make_backlink):
    website = await make_website()
    resource = await make_resource()
    backlink = await make_backlink(website["id"], resource["id"])

    response = await client.patch(f"/api/backlinks/{backlink['id']}", json={})
    assert response.status_code == 400


async def test_update_missing_backlink(client):
    response = await client.patch("/api/backlinks/77", json={"status": "live"})
    assert response.status_code == 404


async def test_bulk_update(client, make_website, make_resource, make_backlink):
    website = await make_website()
    first = await make_backlink(website["id"], (await make_resource(domain="one.example.com"))["id"])
    second = await make_backlink(website["id"], (await make_resource(domain="two.example.com"))["id"])
    untouched = await make_backlink(website["id"], (await make_resource(domain="three.example.com"))["id"])

    response = await client.patch("/api/backlinks/bulk", json={
        "backlink_ids": [first["id"], second["id"], 999],
        "updates": {"status": "requested"}
    })
    assert response.status_code == 200
    body = response.json()
    assert body["data"] == {"updated": 2}
    assert body["message"] == "Updated 2 backlinks"

    statuses = [
        (await client.get(f"/api/backlinks/{b['id']}")).json()["data"]["status"]
        for b in (first, second, untouched)
    ]
    assert statuses == ["requested", "requested", "pending"]


async def test_bulk_update_rejects_bad_input(client):
    response = await client.patch("/api/backlinks/bulk", json={
        "backlink_ids": [],
        "updates": {"status": "live"}
    })
    assert response.status_code == 400

    response = await client.patch("/api/backlinks/bulk", json={
        "backlink_ids": [1],
        "updates": {"status": "gone"}
    })
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid status value"


async def test_delete_backlink(client, make_website, make_resource, make_backlink):
    website = await make_website()
    resource = await make_resource()
    backlink = await make_backlink(website["id"], resource["id"])

    response = await client.delete(f"/api/backlinks/{backlink['id']}")
    assert response.status_code == 200
    assert response.json() == {"data": None, "success": True, "message": "Backlink deleted successfully"}

    assert (await client.delete(f"/api/backlinks/{backlink['id']}")).status_code == 404
    assert (await client.get(f"/api/backlinks/{backlink['id']}")).status_code == 404
