"""
Design
======

The ingester mirrors a manga reading site into our own database and image
storage. It runs continuously, either as the long-lived ``run_ingest``
management command or one pass at a time through ``ingest_catalog_task``.

General goals:

* All state is stored in the database: what has been ingested, and which
  categories are currently being worked on
* A chapter is either stored completely, with every one of its pages, or not
  at all, so an interrupted or failed chapter is simply picked up again on the
  next pass
* Several ingesters may run side by side; the per-category lease keeps them
  from working on the same category at once

A pass works like this:

1. The catalog of categories is listed. In the top30 run mode it is narrowed
   down to the names in the popularity feed, and it may be walked in reverse
   so that two ingesters can start from opposite ends. If the catalog can't
   be listed the loop waits five minutes and tries again.
2. For each category a CategoryProcessing lease is taken. If another
   ingester holds it, the category is skipped after a short wait.
3. The category's chapters are listed and compared against the chapter names
   already stored for it. The Category record (with its details, genres and
   cover image) is created the first time there is something new to store.
4. Each new chapter is handled by the ChapterWorker: its pages are fetched
   concurrently, every image is watermarked and written to a sharded
   ``<bucket>/<uuid>.jpg`` path, and the Chapter and Page records are then
   written in one transaction. A failure on any page discards the whole
   chapter, including the files already written for it.
5. The lease is released and the next category is processed.

All outbound HTTP requests share one bounded ClientPool, which is what limits
how much load the ingester puts on the source site.
"""
