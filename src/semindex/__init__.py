"""semindex: document indexing and semantic retrieval for RAG pipelines."""
