# productapi

A small HTTP API for a product catalogue. Products are loaded from a JSON
file at start-up, kept in memory, and written back to the file after every
change. The API is a plain WSGI application and needs nothing beyond the
Python standard library.

## Installing

```
pip install .
```

To run the tests as well:

```
pip install ".[test]"
pytest
```

## Running the server

```
productapi
```

The command reads the products from `products.json` in the current directory
and serves them with the standard library's WSGI server. It prints
`Server is running on port 8080` and serves until interrupted.

Options:

| Option      | Default         | Meaning                             |
|-------------|-----------------|-------------------------------------|
| `--host`    | all addresses   | address to listen on                |
| `--port`    | `8080`          | port to listen on                   |
| `--storage` | `products.json` | JSON file holding the products      |

The storage file must exist and hold a JSON array of products (or `null`);
if it cannot be read or decoded, the command stops with an
`productapi.errors.ApiError` before serving. A failure to write the file
after a change is not reported.

## Authentication and logging

Every route under `/products` checks the `TOKEN` request header against the
`TOKEN` environment variable. A mismatch is answered with `401` and the body
`invalid token`. When the variable is not set, only requests without the
header (or with an empty one) are let through.

```
export TOKEN=token
curl -H "TOKEN: token" http://localhost:8080/products/
```

Each request to `/products` also has its method, time, URL and body size
printed to standard output.

`GET /ping` is open and answers `Pong`.

## Routes

| Method | Path                         | What it does                                         |
|--------|------------------------------|------------------------------------------------------|
| GET    | `/ping`                      | Health check, answers `Pong`                         |
| GET    | `/products` or `/products/`  | All products (`null` when there are none)            |
| GET    | `/products/{id}`             | One product by numeric id                            |
| GET    | `/products/search?priceGt=N` | Products priced strictly above `N`; `404` if none    |
| POST   | `/products` or `/products/`  | Create a product, answers `201` with `{"id": ...}`   |
| PUT    | `/products/{id}`             | Replace a product                                    |
| PATCH  | `/products/{id}`             | Change only the fields given in the body             |
| DELETE | `/products/{id}`             | Remove a product, answers `204`                      |

Unknown paths are answered with `404 page not found`, and a known path with
the wrong method with `405` and an `Allow` header.

A product looks like this:

```json
{
  "id": 1,
  "name": "Dell Monitor",
  "quantity": 30,
  "code_value": "Dell-2025-B",
  "is_published": true,
  "expiration": "12/10/2026",
  "price": 1000
}
```

When creating a product, `name`, `quantity`, `code_value`, `expiration` and
`price` must be given, and `expiration` must have the form `dd/mm/yyyy`;
otherwise the answer is `400` naming the first missing or invalid field,
such as `name should be informed`. A body that is not valid JSON is answered
with `422`. New products get the id after the highest one seen so far.

Every `code_value` must be unique; a duplicate is answered with `409` and
`error code already exists`. Unknown ids are answered with
`404 resource product of id N not found`, and ids that are not integers with
`400 error parsing url param`. Error bodies are plain text followed by a
newline.

## Using it as a library

The pieces can be put together by hand, for example to serve the application
from another WSGI server or to keep the data somewhere else:

```python
from wsgiref.simple_server import make_server

from productapi.router import Router
from productapi.storage import JsonStorage

app = Router(JsonStorage("products.json")).map_routes()
make_server("", 8080, app).serve_forever()
```

- `productapi.storage.Storage` is the abstract store with `get()` and
  `save(products)`; `JsonStorage(path)` keeps products in one JSON file.
- `productapi.repository.JsonProductRepository(storage, products)` holds the
  products in memory, enforces unique codes and saves through the storage.
- `productapi.handler.ProductHandler(repository)` turns `Request` values into
  `Response` values.
- `productapi.middleware` provides `authenticate` and `log_request`, which
  wrap a handler.
- `productapi.router.Application` is the WSGI callable; its `handle(request)`
  method can be called directly with a `productapi.web.Request`, which is
  handy in tests.
- `productapi.domain` holds `Product`, `PostOrPutRequest`, `PartialProduct`
  and `PostResponse`.
- Errors raised by the repository, storage and validation are
  `productapi.errors.ApiError` instances carrying the HTTP status to answer
  with.

## What it does not do

Products live in a single JSON file that is rewritten whole on every change;
there is no database and no locking between processes. The bundled command
uses the standard library's development WSGI server, without TLS.