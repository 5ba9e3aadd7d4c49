async def test_create_resource_defaults(client):
    response = await client.post("/api/resources", json={
        "domain": "ToolsHub.com",
        "url": "https://toolshub.com/submit",
        "category": "tools-directory"
    })
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Resource created successfully"
    data = body["data"]
    assert data["domain"] == "toolshub.com"
    assert data["domain_authority"] == 0
    assert data["cost"] == 0
    assert data["backlink_count"] == 0
    assert data["live_backlinks"] == 0


async def test_create_resource_invalid_category(client):
    response = await client.post("/api/resources", json={
        "domain": "x.com",
        "url": "https://x.com",
        "category": "blog"
    })
    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Invalid category"}


async def test_create_resource_out_of_range_authority(client):
    response = await client.post("/api/resources", json={
        "domain": "x.com",
        "url": "https://x.com",
        "category": "ai-directory",
        "domain_authority": 101
    })
    assert response.status_code == 400


async def test_create_resource_duplicate_domain(client, make_resource):
    await make_resource(domain="dup.example.com")

    response = await client.post("/api/resources", json={
        "domain": "DUP.example.com",
        "url": "https://dup.example.com",
        "category": "saas-directory"
    })
    assert response.status_code == 409
    assert response.json()["message"] == "A resource with this domain already exists"


async def test_list_resources_pagination(client, make_resource):
    for i in range(1, 26):
        await make_resource(domain=f"tools{i:02d}.example.com", category="ai-directory", domain_authority=i)
    # Noise that must not match the filter
    for i in range(3):
        await make_resource(domain=f"tools-other{i}.example.com", category="startup-directory")
        await make_resource(domain=f"plain{i}.example.com", category="ai-directory")

    response = await client.get("/api/resources", params={
        "category": "ai-directory",
        "search": "tools",
        "page": "2",
        "limit": "10"
    })
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["pagination"] == {"page": 2, "limit": 10, "total": 25, "totalPages": 3}
    # Sorted by domain authority, highest first: page 2 holds 15 down to 6
    assert [r["domain_authority"] for r in body["data"]] == list(range(15, 5, -1))


async def test_list_resources_page_past_end(client, make_resource):
    await make_resource(domain="only.example.com")

    response = await client.get("/api/resources", params={"page": "9", "limit": "10"})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"] == []
    assert body["pagination"]["total"] == 1
    assert body["pagination"]["totalPages"] == 1


async def test_list_resources_bad_paging_falls_back(client, make_resource):
    await make_resource()

    body = (await client.get("/api/resources", params={"page": "-1", "limit": "x"})).json()
    assert body["pagination"]["page"] == 1
    assert body["pagination"]["limit"] == 50
    assert len(body["data"]) == 1


async def test_search_escapes_wildcards(client, make_resource):
    await make_resource(domain="a-b.example.com")
    await make_resource(domain="axb.example.com")

    body = (await client.get("/api/resources", params={"search": "a_b"})).json()
    assert body["pagination"]["total"] == 0


async def test_get_resource_with_stats(client, make_website, make_resource, make_backlink):
    website = await make_website()
    resource = await make_resource()
    await make_backlink(website["id"], resource["id"], status="live")

    response = await client.get(f"/api/resources/{resource['id']}")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["backlink_count"] == 1
    assert data["live_backlinks"] == 1


async def test_update_resource(client, make_resource):
    resource = await make_resource(contact_email="hi@tools.example.com", notes="old")

    response = await client.put(f"/api/resources/{resource['id']}", json={
        "domain_authority": 72,
        "contact_email": "",
        "cost": 19.5
    })
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["domain_authority"] == 72
    assert data["contact_email"] is None
    assert data["cost"] == 19.5
    assert data["notes"] == "old"


async def test_update_resource_invalid_category(client, make_resource):
    resource = await make_resource()

    response = await client.put(f"/api/resources/{resource['id']}", json={"category": "nope"})
    assert response.status_code == 400


async def test_update_resource_without_fields(client, make_resource):
    resource = await make_resource()

    response = await client.put(f"/api/resources/{resource['id']}", json={})
    assert response.status_code == 400
    assert response.json()["message"] == "No fields to update"


async def test_delete_resource_cascades_backlinks(client, make_website, make_resource, make_backlink):
    first = await make_website(domain="a.com", name="A")
    second = await make_website(domain="b.com", name="B")
    resource = await make_resource(domain="shared.example.com")
    keeper = await make_resource(domain="keeper.example.com")
    await make_backlink(first["id"], resource["id"])
    await make_backlink(second["id"], resource["id"], status="live")
    kept = await make_backlink(first["id"], keeper["id"])

    response = await client.delete(f"/api/resources/{resource['id']}")
    assert response.status_code == 200
    body = response.json()
    assert body["data"] == {"removed_backlinks": 2}
    assert body["message"] == (
        "Resource deleted successfully. Removed 2 backlink tracking entries from all websites."
    )

    assert (await client.get(f"/api/resources/{resource['id']}")).status_code == 404
    assert (await client.get(f"/api/backlinks/{kept['id']}")).status_code == 200

    websites = (await client.get("/api/websites")).json()["data"]
    totals = {w["domain"]: w["totalOpportunities"] for w in websites}
    assert totals == {"a.com": 1, "b.com": 0}


async def test_delete_inactive_resource_is_not_found(client, make_resource):
    resource = await make_resource()
    assert (await client.delete(f"/api/resources/{resource['id']}")).status_code == 200

    response = await client.delete(f"/api/resources/{resource['id']}")
    assert response.status_code == 404
    assert response.json()["message"] == "Resource not found"


async def test_delete_missing_resource(client):
    response = await client.delete("/api/resources/1234")
    assert response.status_code == 404


async def test_list_resources_huge_page_is_empty(client, make_resource):
    await make_resource()

    response = await client.get("/api/resources", params={
        "page": "100000000000000000000",
        "limit": "10"
    })
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"] == []
    assert body["pagination"]["total"] == 1


async def test_list_resources_huge_limit(client, make_resource):
    await make_resource(domain="one.example.com")
    await make_resource(domain="two.example.com")

    response = await client.get("/api/resources", params={"limit": "100000000000000000000"})
    assert response.status_code == 200
    body = response.json()
    assert len(body["data"]) == 2
    assert body["pagination"]["totalPages"] == 1


async def test_update_missing_resource_with_taken_domain(client, make_resource):
    await make_resource(domain="taken.example.com")

    response = await client.put("/api/resources/999", json={"domain": "taken.example.com"})
    assert response.status_code == 404
    assert response.json()["message"] == "Resource not found"


async def test_update_deleted_resource_with_taken_domain(client, make_resource):
    await make_resource(domain="taken.example.com")
    gone = await make_resource(domain="gone.example.com")
    await client.delete(f"/api/resources/{gone['id']}")

    response = await client.put(f"/api/resources/{gone['id']}", json={"domain": "taken.example.com"})
    assert response.status_code == 404


async def test_create_resource_blank_url(client):
    response = await client.post("/api/resources", json={
        "domain": "x.com",
        "url": "   ",
        "category": "ai-directory"
    })
    assert response.status_code == 400
    assert "url" in response.json()["message"]
