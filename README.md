# planmasta

A small HTTP server that relays requests to two upstream APIs:

- `POST /chat` passes the request body unchanged to the OpenAI chat
  completions endpoint and answers with the upstream status code and body.
- `POST /replicate` takes a JSON body `{"quality": "...", "prompt": "..."}`,
  picks an image model by quality, waits for the prediction and answers with
  `{"output": "..."}`.

Quality selects the model:

| quality                  | model                              |
|--------------------------|------------------------------------|
| `low`                    | ideogram-ai/ideogram-v3-turbo      |
| `medium`                 | ideogram-ai/ideogram-v3-balanced   |
| `high` or anything else  | black-forest-labs/flux-kontext-max |

Keys of the `/replicate` body are matched case-insensitively and unknown keys
are ignored; only the prompt is sent on to the model.

## Installation

```
pip install .
```

## Configuration

Settings are read from a `.env` file and from the environment. Values that
are already set in the environment take precedence over the file.

| variable          | required | default |
|-------------------|----------|---------|
| `OPENAI_API_KEY`  | yes      |         |
| `REPLICATE_TOKEN` | yes      |         |
| `PORT`            | no       | `8080`  |

The `.env` file must exist. By default it is `.env` in the working directory;
another path can be given with `--env-file`. A missing file or a missing key
stops start-up with a `planmasta.config.ConfigError`.

Example `.env`:

```
OPENAI_API_KEY=placeholder
REPLICATE_TOKEN=placeholder
PORT=8080
```

## Running

```
planmasta
planmasta --env-file path/to/.env
```

The server listens on all interfaces at the configured port, using Flask's
built-in server. Logs are written to standard output as JSON lines at debug
level, one per event, including one line per request with method, path,
status, client address, request id and duration in milliseconds.

## Example requests

```
curl -X POST localhost:8080/chat \
  -H 'Content-Type: application/json' \
  -d '{"model": "gpt-4o-mini", "messages": [{"role": "user", "content": "Hello"}]}'

curl -X POST localhost:8080/replicate \
  -H 'Content-Type: application/json' \
  -d '{"quality": "low", "prompt": "a lighthouse at dusk"}'
```

## Errors

- If an upstream call cannot be made or its answer cannot be read, both
  endpoints answer with status 500 and `{"error":"Failed to process request"}`.
  For `/replicate` this also covers an answer that is not valid JSON.
- A `/replicate` body that is not a JSON object, or whose `quality` or
  `prompt` is not a string, is answered with status 400 and the decoding
  error as plain text.
- Error statuses from OpenAI itself are passed through to the client as they
  are.

## Library use

- `planmasta.config.load_config(dotenv_path=None)` returns a `Config` with
  `port`, `openai_key` and `replicate_key`.
- `planmasta.openai_service.OpenAIService(api_key, logger=None, session=None)`
  with `send_request(body)` returning the upstream body and status code.
- `planmasta.replicate_service.ReplicateService(api_key, logger=None, session=None)`
  with `send_request(request)` taking a `planmasta.dto.GenerateRequest` and
  returning a `ReplicateResponse`; `model_url(quality)` gives the endpoint
  chosen for a quality.
- `planmasta.app.create_app(openai_service, replicate_service, logger=None)`
  builds the Flask application; `configure_logging(stream=None)` sets up the
  JSON log output.

## What it does not do

There is no authentication of clients, no retrying of upstream calls and no
polling of Replicate predictions beyond asking the API to wait for the result.
The built-in server is meant for simple deployments; for production the Flask
application from `create_app` can be run under any WSGI server.

## Tests

```
pip install .[test]
pytest
```