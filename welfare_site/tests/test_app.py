import unittest

from fastapi.testclient import TestClient

from welfare_site.app import create_app
from welfare_site.config import Settings
from welfare_site.content import DEFAULT_ABOUT, DEFAULT_CONTACT, DEFAULT_HOME
from welfare_site.store import InMemoryDocumentStore, SqlDocumentStore, StoreError


class FailingStore(InMemoryDocumentStore):
    """Store whose reads always fail."""

    def get(self, collection, doc_id):
        raise StoreError("boom")

    def list(self, collection, **kwargs):
        raise StoreError("boom")


def _client(store):
    return TestClient(create_app(store=store, settings=Settings(store_backend="memory")))


class ContentApiTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryDocumentStore()
        self.client = _client(self.store)

    def test_empty_store_returns_defaults(self):
        self.assertEqual(self.client.get("/api/home").json(), DEFAULT_HOME)
        self.assertEqual(self.client.get("/api/about").json(), DEFAULT_ABOUT)
        self.assertEqual(self.client.get("/api/contact").json(), DEFAULT_CONTACT)

        members = self.client.get("/api/members").json()
        self.assertEqual(members["headline"], "Our Team")
        self.assertEqual(members["members"], [])
        self.assertIn("description", members)
        self.assertIn("callToAction", members)
        self.assertIn("updatedAt", members)

        self.assertEqual(
            self.client.get("/api/gallery").json(), {"albums": [], "images": []}
        )

    def test_home_merge_write_keeps_omitted_fields(self):
        response = self.client.post(
            "/api/home",
            json={"siteTitle": "H2H", "hero": {"headline": "Hello"}},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(), {"message": "Homepage data updated successfully!"}
        )

        self.client.post("/api/home", json={"cta": {"title": "Join"}})

        home = self.client.get("/api/home").json()
        self.assertEqual(home["siteTitle"], "H2H")
        self.assertEqual(home["hero"]["headline"], "Hello")
        self.assertEqual(home["hero"]["button1Text"], "Learn More")
        self.assertEqual(home["hero"]["backgroundImage"], "/images/default-hero.jpg")
        self.assertEqual(home["cta"]["title"], "Join")
        self.assertEqual(home["cta"]["button2Text"], "Donate Now")
        self.assertEqual(home["aboutSummary"], DEFAULT_HOME["aboutSummary"])
        self.assertEqual(home["featuredMemberIds"], [])

    def test_home_rejects_bad_featured_members(self):
        response = self.client.post("/api/home", json={"featuredMemberIds": "m1"})
        self.assertEqual(response.status_code, 400)
        self.assertIn("message", response.json())

        response = self.client.post(
            "/api/home", json={"featuredMemberIds": ["a", "b", "c", "d"]}
        )
        self.assertEqual(response.status_code, 400)

        response = self.client.post("/api/home", json={"featuredMemberIds": ["ghost"]})
        self.assertEqual(response.status_code, 400)
        self.assertIn("ghost", response.json()["message"])

    def test_home_accepts_existing_featured_members(self):
        self.client.post(
            "/api/members",
            json={
                "headline": "Team",
                "members": [{"id": "m1", "name": "Asha Rao", "role": "Chair"}],
            },
        )
        response = self.client.post("/api/home", json={"featuredMemberIds": ["m1"]})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.client.get("/api/home").json()["featuredMemberIds"], ["m1"])

    def test_about_merge_write(self):
        response = self.client.post(
            "/api/about", json={"mission": "Help", "values": ["Care"]}
        )
        self.assertEqual(
            response.json(),
            {"success": True, "message": "About data saved successfully!"},
        )
        self.client.post("/api/about", json={"vision": "A kinder town"})

        about = self.client.get("/api/about").json()
        self.assertEqual(about["mission"], "Help")
        self.assertEqual(about["vision"], "A kinder town")
        self.assertEqual(about["values"], ["Care"])
        self.assertEqual(about["history"], "")

    def test_about_rejects_non_object(self):
        response = self.client.post("/api/about", json=["not", "an", "object"])
        self.assertEqual(response.status_code, 400)

    def test_contact_social_links_are_not_merged_with_defaults(self):
        self.client.post(
            "/api/contact",
            json={"email": "hi@h2h.org", "socialLinks": {"facebook": "fb.com/h2h"}},
        )
        contact = self.client.get("/api/contact").json()
        self.assertEqual(contact["email"], "hi@h2h.org")
        self.assertEqual(contact["socialLinks"], {"facebook": "fb.com/h2h"})
        self.assertTrue(contact["formEnabled"])
        self.assertEqual(contact["contactHeadline"], "Get In Touch")

    def test_members_post_replaces_document(self):
        full = {
            "headline": "Team",
            "description": "Volunteers",
            "callToAction": "Join",
            "members": [
                {"id": "m1", "name": "Asha Rao", "role": "Chair", "bio": "Founder"}
            ],
        }
        response = self.client.post("/api/members", json=full)
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["success"])

        response = self.client.post(
            "/api/members",
            json={"headline": "Team", "description": "Volunteers", "members": []},
        )
        self.assertEqual(response.status_code, 200)

        members = self.client.get("/api/members").json()
        self.assertNotIn("callToAction", members)
        self.assertEqual(members["members"], [])
        self.assertIn("updatedAt", members)

    def test_members_post_rejects_bad_shape(self):
        response = self.client.post("/api/members", json={"members": []})
        self.assertEqual(response.status_code, 400)
        response = self.client.post(
            "/api/members", json={"headline": "Team", "members": "nope"}
        )
        self.assertEqual(response.status_code, 400)

    def test_member_by_slug(self):
        self.client.post(
            "/api/members",
            json={"headline": "Team", "members": [{"id": "m1", "name": "Asha  Rao"}]},
        )
        response = self.client.get("/api/members/asha-rao")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["id"], "m1")
        self.assertEqual(self.client.get("/api/members/nobody").status_code, 404)


class ReadFailureTests(unittest.TestCase):
    def setUp(self):
        self.client = _client(FailingStore())

    def test_content_reads_return_defaults_with_error_status(self):
        response = self.client.get("/api/home")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), DEFAULT_HOME)

        response = self.client.get("/api/contact")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), DEFAULT_CONTACT)

    def test_other_reads_return_message(self):
        for path in ("/api/members", "/api/gallery", "/api/submissions"):
            response = self.client.get(path)
            self.assertEqual(response.status_code, 500, path)
            self.assertIn("message", response.json())


class SubmissionApiTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryDocumentStore()
        self.client = _client(self.store)

    def test_submit_validation(self):
        response = self.client.post(
            "/api/contact/submit", json={"name": " ", "email": "", "message": ""}
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json()["message"],
            "Missing required fields (name, email, message).",
        )

        response = self.client.post(
            "/api/contact/submit",
            json={"name": "Ravi", "email": "not-an-email", "message": "Hi"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Invalid email format.")
        self.assertEqual(self.client.get("/api/submissions").json(), [])

    def test_submit_and_list(self):
        response = self.client.post(
            "/api/contact/submit",
            json={"name": " Ravi ", "email": "ravi@example.org", "message": "Hello"},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "Submission received successfully!")
        submission_id = response.json()["id"]

        listed = self.client.get("/api/submissions").json()
        self.assertEqual(len(listed), 1)
        self.assertEqual(listed[0]["id"], submission_id)
        self.assertEqual(listed[0]["name"], "Ravi")
        self.assertTrue(listed[0]["submittedAt"].endswith("Z"))

    def test_submit_rejected_when_form_disabled(self):
        self.client.post("/api/contact", json={"formEnabled": False})
        response = self.client.post(
            "/api/contact/submit",
            json={"name": "Ravi", "email": "ravi@example.org", "message": "Hello"},
        )
        self.assertEqual(response.status_code, 403)

    def test_list_is_most_recent_first(self):
        response = self.client.post(
            "/api/submissions",
            json=[
                {
                    "name": "Old",
                    "email": "old@example.org",
                    "message": "first",
                    "submittedAt": "2024-01-01T10:00:00.000Z",
                },
                {
                    "name": "New",
                    "email": "new@example.org",
                    "message": "second",
                    "submittedAt": "2024-02-01T10:00:00Z",
                },
            ],
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json()["message"], "2 submissions added successfully!"
        )

        listed = self.client.get("/api/submissions").json()
        self.assertEqual([s["name"] for s in listed], ["New", "Old"])
        self.assertEqual(listed[0]["submittedAt"], "2024-02-01T10:00:00.000Z")

    def test_batch_import_is_all_or_nothing(self):
        response = self.client.post(
            "/api/submissions",
            json=[
                {"name": "Ok", "email": "ok@example.org", "message": "fine"},
                {"name": "Broken"},
            ],
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.client.get("/api/submissions").json(), [])

    def test_delete_by_timestamp(self):
        self.client.post(
            "/api/submissions",
            json=[
                {
                    "name": "A",
                    "email": "a@example.org",
                    "message": "one",
                    "submittedAt": "2024-01-01T10:00:00.000Z",
                },
                {
                    "name": "B",
                    "email": "b@example.org",
                    "message": "two",
                    "submittedAt": "2024-01-02T10:00:00.000Z",
                },
            ],
        )
        response = self.client.request(
            "DELETE",
            "/api/submissions",
            json={"submittedAt": "2024-01-01T10:00:00.000Z"},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual([s["name"] for s in self.client.get("/api/submissions").json()], ["B"])

        response = self.client.request(
            "DELETE",
            "/api/submissions",
            json={"submittedAt": "1999-01-01T00:00:00.000Z"},
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(len(self.client.get("/api/submissions").json()), 1)

    def test_delete_by_shared_timestamp_removes_one(self):
        stamp = "2024-03-01T09:00:00.000Z"
        self.client.post(
            "/api/submissions",
            json=[
                {"name": "A", "email": "a@example.org", "message": "one", "submittedAt": stamp},
                {"name": "B", "email": "b@example.org", "message": "two", "submittedAt": stamp},
            ],
        )
        response = self.client.request(
            "DELETE", "/api/submissions", json={"submittedAt": stamp}
        )
        self.assertEqual(response.status_code, 200)

        remaining = self.client.get("/api/submissions").json()
        self.assertEqual(len(remaining), 1)
        self.assertIn(remaining[0]["name"], ("A", "B"))
        self.assertEqual(remaining[0]["submittedAt"], stamp)

    def test_batch_import_rejects_blank_fields(self):
        for entry in (
            {"name": "   ", "email": "a@example.org", "message": "hi"},
            {"name": "A", "email": "a@example.org", "message": 42},
        ):
            response = self.client.post("/api/submissions", json=[entry])
            self.assertEqual(response.status_code, 400)
        self.assertEqual(self.client.get("/api/submissions").json(), [])

        response = self.client.post(
            "/api/submissions",
            json={"name": " Asha ", "email": "asha@example.org", "message": " Hi "},
        )
        self.assertEqual(response.status_code, 200)
        stored = self.client.get("/api/submissions").json()[0]
        self.assertEqual((stored["name"], stored["message"]), ("Asha", "Hi"))

    def test_delete_by_id(self):
        submission_id = self.client.post(
            "/api/contact/submit",
            json={"name": "Ravi", "email": "ravi@example.org", "message": "Hello"},
        ).json()["id"]

        response = self.client.request(
            "DELETE", "/api/submissions", json={"id": submission_id}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.client.get("/api/submissions").json(), [])

        response = self.client.delete(f"/api/submissions/{submission_id}")
        self.assertEqual(response.status_code, 404)

    def test_delete_requires_key(self):
        response = self.client.request("DELETE", "/api/submissions", json={})
        self.assertEqual(response.status_code, 400)


class GalleryApiTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryDocumentStore()
        self.client = _client(self.store)

    def test_album_lifecycle(self):
        response = self.client.post(
            "/api/gallery/album", json={"id": "album-1", "albumName": "Picnic"}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["id"], "album-1")

        response = self.client.post(
            "/api/gallery/image",
            json={"url": "https://x/y.jpg", "albumId": "album-1"},
        )
        self.assertEqual(response.status_code, 200)
        image = response.json()
        self.assertTrue(image["id"])
        self.assertIn("createdAt", image)

        gallery = self.client.get("/api/gallery").json()
        self.assertEqual([a["id"] for a in gallery["albums"]], ["album-1"])
        self.assertEqual(gallery["images"][0]["albumId"], "album-1")

        album_page = self.client.get("/api/gallery/album/album-1").json()
        self.assertEqual(album_page["album"]["albumName"], "Picnic")
        self.assertEqual(len(album_page["images"]), 1)

        response = self.client.request(
            "DELETE", "/api/gallery", json={"albumId": "album-1"}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            self.client.get("/api/gallery").json(), {"albums": [], "images": []}
        )

    def test_album_id_clash_is_rejected(self):
        self.client.post("/api/gallery/album", json={"id": "a1", "albumName": "Picnic"})
        response = self.client.post(
            "/api/gallery/album", json={"id": "a1", "albumName": "Other"}
        )
        self.assertEqual(response.status_code, 409)
        self.assertIn("message", response.json())
        album = self.client.get("/api/gallery/album/a1").json()["album"]
        self.assertEqual(album["albumName"], "Picnic")

    def test_image_id_clash_is_rejected(self):
        self.client.post("/api/gallery/album", json={"id": "a1", "albumName": "One"})
        self.client.post("/api/gallery/album", json={"id": "a2", "albumName": "Two"})
        self.client.post(
            "/api/gallery/image",
            json={"id": "img-1", "url": "/1.jpg", "albumId": "a1", "caption": "keep"},
        )
        response = self.client.post(
            "/api/gallery/image",
            json={"id": "img-1", "url": "/2.jpg", "albumId": "a2"},
        )
        self.assertEqual(response.status_code, 409)

        images = self.client.get("/api/gallery").json()["images"]
        self.assertEqual(len(images), 1)
        self.assertEqual(images[0]["albumId"], "a1")
        self.assertEqual(images[0]["caption"], "keep")

    def test_album_requires_name(self):
        response = self.client.post("/api/gallery/album", json={"albumName": "  "})
        self.assertEqual(response.status_code, 400)

    def test_generated_album_id(self):
        album = self.client.post("/api/gallery/album", json={"albumName": "Fair"}).json()
        self.assertTrue(album["id"].startswith("album-"))
        self.assertTrue(album["date"])

    def test_image_with_unknown_album_is_rejected(self):
        response = self.client.post(
            "/api/gallery/image",
            json={"url": "https://x/y.jpg", "albumId": "missing"},
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(self.client.get("/api/gallery").json()["images"], [])

        response = self.client.post("/api/gallery/image", json={"url": "https://x/y.jpg"})
        self.assertEqual(response.status_code, 400)

    def test_update_and_delete_image(self):
        self.client.post("/api/gallery/album", json={"id": "a1", "albumName": "One"})
        self.client.post("/api/gallery/album", json={"id": "a2", "albumName": "Two"})
        image = self.client.post(
            "/api/gallery/image",
            json={"id": "img-1", "url": "/images/1.jpg", "albumId": "a1", "caption": "c"},
        ).json()

        response = self.client.put(
            "/api/gallery/image",
            json={"id": image["id"], "url": "/images/1b.jpg", "albumId": "a2"},
        )
        self.assertEqual(response.status_code, 200)
        updated = response.json()
        self.assertEqual(updated["albumId"], "a2")
        self.assertEqual(updated["caption"], "c")
        self.assertIn("updatedAt", updated)

        response = self.client.put(
            "/api/gallery/image",
            json={"id": image["id"], "url": "/images/1b.jpg", "albumId": "gone"},
        )
        self.assertEqual(response.status_code, 404)
        response = self.client.put(
            "/api/gallery/image",
            json={"id": "nope", "url": "/images/1b.jpg", "albumId": "a2"},
        )
        self.assertEqual(response.status_code, 404)

        response = self.client.request(
            "DELETE", "/api/gallery/image", json={"id": image["id"]}
        )
        self.assertEqual(response.json(), {"message": "Image deleted successfully"})
        response = self.client.request(
            "DELETE", "/api/gallery/image", json={"id": image["id"]}
        )
        self.assertEqual(response.status_code, 404)

    def test_delete_album_only_removes_its_images(self):
        self.client.post("/api/gallery/album", json={"id": "a1", "albumName": "One"})
        self.client.post("/api/gallery/album", json={"id": "a2", "albumName": "Two"})
        for album_id in ("a1", "a1", "a2"):
            self.client.post(
                "/api/gallery/image", json={"url": "/images/x.jpg", "albumId": album_id}
            )

        self.client.request("DELETE", "/api/gallery", json={"albumId": "a1"})
        gallery = self.client.get("/api/gallery").json()
        self.assertEqual([a["id"] for a in gallery["albums"]], ["a2"])
        self.assertEqual({i["albumId"] for i in gallery["images"]}, {"a2"})

        response = self.client.request("DELETE", "/api/gallery", json={"albumId": "a1"})
        self.assertEqual(response.status_code, 404)

    def test_bulk_save(self):
        response = self.client.post(
            "/api/gallery",
            json={
                "albums": [{"id": "a1", "albumName": "One", "createdAt": "2024-01-01"}],
                "images": [{"id": "i1", "url": "/images/1.jpg", "albumId": "a1"}],
            },
        )
        self.assertEqual(response.json(), {"success": True})

        response = self.client.post(
            "/api/gallery",
            json={"albums": [], "images": [{"id": "i2", "url": "/x.jpg", "albumId": "zz"}]},
        )
        self.assertEqual(response.status_code, 404)

        response = self.client.post("/api/gallery", json={"albums": {}, "images": []})
        self.assertEqual(response.status_code, 400)

        gallery = self.client.get("/api/gallery").json()
        self.assertEqual(len(gallery["albums"]), 1)
        self.assertEqual([i["id"] for i in gallery["images"]], ["i1"])


class SqlStoreApiTests(unittest.TestCase):
    """
    Runs requests against an in-memory SQLite store; handlers execute on
    worker threads, not the thread that created the tables.
    """

    def setUp(self):
        self.store = SqlDocumentStore("sqlite://")
        self.addCleanup(self.store.close)
        self.client = _client(self.store)

    def test_content_round_trip(self):
        response = self.client.post("/api/about", json={"mission": "Help"})
        self.assertEqual(response.status_code, 200)
        about = self.client.get("/api/about")
        self.assertEqual(about.status_code, 200)
        self.assertEqual(about.json()["mission"], "Help")

    def test_submissions_and_gallery(self):
        response = self.client.post(
            "/api/contact/submit",
            json={"name": "Ravi", "email": "ravi@example.org", "message": "Hello"},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(self.client.get("/api/submissions").json()), 1)

        self.client.post("/api/gallery/album", json={"id": "a1", "albumName": "One"})
        self.client.post("/api/gallery/image", json={"url": "/x.jpg", "albumId": "a1"})
        response = self.client.request("DELETE", "/api/gallery", json={"albumId": "a1"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            self.client.get("/api/gallery").json(), {"albums": [], "images": []}
        )


if __name__ == "__main__":
    unittest.main()
