from storefront.client.storage import LocalStorage


class TestLocalStorage:
    def test_missing_file_reads_empty(self, tmp_path):
        storage = LocalStorage(tmp_path / "storage.json")
        assert storage.get_item("cart") is None

    def test_set_get_remove(self, tmp_path):
        storage = LocalStorage(tmp_path / "storage.json")

        storage.set_item("token", "abc")
        storage.set_item("user", '{"id": 1}')

        assert storage.get_item("token") == "abc"
        storage.remove_item("token")
        assert storage.get_item("token") is None
        assert storage.get_item("user") == '{"id": 1}'

    def test_survives_new_instance(self, tmp_path):
        path = tmp_path / "nested" / "storage.json"
        LocalStorage(path).set_item("cart", "[]")

        assert LocalStorage(path).get_item("cart") == "[]"

    def test_corrupt_file_reads_empty(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text("{not json", encoding="utf-8")

        storage = LocalStorage(path)
        assert storage.get_item("cart") is None
        storage.set_item("cart", "x")
        assert storage.get_item("cart") == "x"

    def test_no_temp_files_left(self, tmp_path):
        storage = LocalStorage(tmp_path / "storage.json")
        storage.set_item("a", "1")
        storage.set_item("b", "2")

        assert [p.name for p in tmp_path.iterdir()] == ["storage.json"]
