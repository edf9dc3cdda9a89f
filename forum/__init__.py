"""Forum microservices: posts, threads and users over fixtures or a table store."""
