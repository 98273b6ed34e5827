from overdrive_import.processing.merging import chunk_ids, merge_records


def test_merge_without_metadata_returns_products():
    products = [{"id": "A", "title": "One"}, {"id": "B", "title": "Two"}]
    assert merge_records([], products) == products


def test_merge_overlays_metadata_and_keeps_product_order():
    products = [{"id": "A", "title": "a"}, {"id": "B", "title": "b"}, {"id": "C", "title": "c"}]
    metadata = [
        {"id": "C", "title": "C full", "publisher": "P"},
        {"id": "A", "series": "S"},
    ]

    merged = merge_records(metadata, products)

    assert [r["id"] for r in merged] == ["A", "B", "C"]
    assert merged[0] == {"id": "A", "title": "a", "series": "S"}
    assert merged[1] == {"id": "B", "title": "b"}
    assert merged[2] == {"id": "C", "title": "C full", "publisher": "P"}


def test_merge_drops_metadata_for_unknown_ids():
    products = [{"id": "A"}]
    merged = merge_records([{"id": "Z", "title": "stray"}, {"title": "no id"}], products)
    assert merged == [{"id": "A"}]


def test_merge_does_not_mutate_inputs():
    products = [{"id": "A"}]
    merge_records([{"id": "A", "extra": 1}], products)
    assert products == [{"id": "A"}]


def test_merge_collapses_duplicate_product_ids():
    products = [{"id": "A", "n": 1}, {"id": "B"}, {"id": "A", "n": 2}]
    merged = merge_records([], products)
    assert [r["id"] for r in merged] == ["A", "B"]


def test_chunk_ids():
    ids = [str(i) for i in range(60)]
    chunks = list(chunk_ids(ids, 25))
    assert [len(c) for c in chunks] == [25, 25, 10]
    assert sum(chunks, []) == ids
