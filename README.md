# antimg

`antimg` runs a chain of image attacks that aim to weaken invisible
watermarks hidden in a picture. It also provides the pieces a small upload
service needs around that work: upload checks, signed tokens, a rate
limiter, configuration and JSON response bodies.

It reads JPEG, PNG, BMP and WebP input. PNG and BMP results are encoded in
their own format. Everything else, WebP included, is encoded as JPEG.

## Installation

```
pip install antimg
```

To run the test suite, install the test extra and run pytest:

```
pip install "antimg[test]"
pytest
```

## What the attack does

`antimg.image_service.ImageService.attack_watermark(image, attack_level)`
applies the rounds below in order. The attack level runs from 0.0 to 1.0
and sets how strong each round is, and in most rounds also how many times
it repeats.

1. Geometric. A random rotation above level 0.2, and a random rescale above
   0.3. Then a number of rounds of rotation, rescale and centre crop back to
   the original size. Above level 0.8 there is one final rotation.
2. Noise. Random brightness and contrast shifts.
3. Frequency. Gaussian blur and sharpening, applied in turn.
4. Compression. Repeated JPEG re-encoding, with the quality falling each
   time.
5. Colour. More brightness and contrast jitter.
6. Mixed. This round runs only above level 0.7. It does three passes, each
   of which blurs, sharpens, shifts the tone, rotates and re-encodes as
   heavy JPEG.

The random numbers come from the service's `rng`, a `random.Random`. Pass
a seeded `random.Random` to `ImageService(rng=..., timeout=...)` when you
need results you can reproduce.

`ImageService.process_image(data, attack_level)` accepts raw bytes or a
binary file object. It decodes the image and runs the attack in a
background thread. It returns a tuple `(image, format_name)`, where
`format_name` is one of `"jpeg"`, `"png"`, `"bmp"` or `"webp"`.

It raises two errors:

- `ProcessingError` when the input cannot be decoded.
- `ProcessingTimeout` when the work does not finish within `timeout`
  seconds. The default timeout is 30 seconds.

`antimg.response.encode_image_response(image, format)` turns the result
into an `ImageResponse`. The object carries:

- `body`: the encoded bytes.
- `filename`: `processed_image.<format>`, or `processed_image.jpeg` when
  the format is `jpg`. For WebP input the filename ends in `.webp`, even
  though the body is JPEG.
- `headers`: `Content-Type: application/octet-stream`, an attachment
  `Content-Disposition` and `Cache-Control: no-cache`.

JPEG output uses quality 90. Any transparent areas are flattened onto
black.

### Image operations

`antimg.imaging` holds the operations the attack uses, and you can call
them on their own. Each takes a Pillow image. Each returns an RGBA image,
except `jpeg_roundtrip`, which returns the decoded JPEG.

- `adjust_brightness(image, percentage)`: shifts the colour channels by a
  share of full scale. The percentage is clamped to -100..100.
- `adjust_contrast(image, percentage)`: changes contrast around mid-grey.
  The percentage is clamped to -100..100.
- `blur(image, sigma)`: Gaussian blur. A `sigma` of zero or less gives a
  plain copy.
- `sharpen(image, sigma)`: unsharp mask.
- `rotate(image, angle)`: rotates counter-clockwise by `angle` degrees. The
  canvas grows to fit, and the new areas are transparent.
- `resize(image, width, height)`: Lanczos resize. If one dimension is 0, the
  aspect ratio is kept. Sizes that cannot be made give an empty image.
- `crop_center(image, width, height)`: cuts out an area around the centre,
  clipped to the image.
- `jpeg_roundtrip(image, quality)`: encodes as JPEG and decodes it again.
  Raises `ValueError` for an empty image.

## Checking uploads

`antimg.validation` checks request input. Every rejection raises
`ValidationError`, which is a subclass of `ValueError`.

- `validate_image_upload(filename, size, content_type=None)` rejects:
  - sizes over 100 MB (`MAX_UPLOAD_SIZE`);
  - extensions other than jpg, jpeg, png, bmp and webp, compared without
    regard to case;
  - a content type that is given but is not one of `image/jpeg`,
    `image/jpg`, `image/png`, `image/bmp` or `image/webp`.
- `parse_attack_level(value)` returns 0.5 (`DEFAULT_ATTACK_LEVEL`) for an
  empty value. It rejects text that is not a number, and numbers outside
  0.0 to 1.0.
- `parse_attack_level_lenient(value)` returns 0.5 for any bad or empty
  input instead of raising.

## Authentication tokens

`antimg.tokens` issues and checks JSON Web Tokens signed with HS256. Each
token carries `username` and `role` claims.

- `generate_web_token(username, role, secret, now=None)`: a session token
  that expires after seven days.
- `generate_api_token(username, role, secret, now=None)`: a token with no
  expiry.
- `decode_claims(token, secret)`: checks the signature, the expiry and the
  not-before time. It returns `Claims(username, role, issued_at,
  expires_at)`.
- `classify_token(token, secret, current_api_token, now=None)`: checks a
  bearer token and returns `(claims, kind)`:
  - `kind` is `"api_token"` when the token equals `current_api_token`;
  - `kind` is `"web_token"` when the token carries an expiry and has not yet
    expired;
  - anything else raises `TokenError`. That covers bad signatures, expired
    tokens, missing user claims, and an API token that is no longer the
    current one.

## Rate limiting

`antimg.ratelimit.RateLimiter(limit, window, clock=time.monotonic)` is a
thread-safe sliding-window limiter. It keeps its state in memory, keyed by
client address. `window` is given in seconds or as a `timedelta`.

- `allow(client_ip)` records a request. It returns `False` once the client
  has reached `limit` requests within the window.
- `rate_limit_response()` returns the status code `429` and the JSON body
  to send back.

## Configuration

`antimg.config.load_config(environ=None)` reads the settings from a
mapping, or from the process environment when no mapping is given. It
returns a frozen `Config` with the fields `port`, `jwt_secret`,
`admin_username` and `admin_password`. `Config.from_env(environ)` does the
same thing.

| Variable         | Default    | Notes                                          |
|------------------|------------|------------------------------------------------|
| `JWT_SECRET`     | none       | Required. At least 32 bytes when UTF-8 encoded. |
| `PORT`           | `8080`     |                                                |
| `ADMIN_USERNAME` | `admin`    |                                                |
| `ADMIN_PASSWORD` | `password` | Change this for any real deployment.           |

An empty variable counts as unset. If `JWT_SECRET` is missing, too short,
or still set to the well-known example value, a `ConfigError` is raised.

## JSON bodies and errors

- `antimg.response.success_payload(data=None)` returns
  `{"code": 200, "message": "success", "data": ...}`. The `data` key is
  left out when `data` is `None`.
- `antimg.response.error_payload(code, message)` returns
  `{"code": code, "message": message}`.
- `antimg.errors` defines `AntimgError` and the subclasses
  `UserNotFoundError`, `UserExistsError` and `InvalidCredentialsError`. Each
  subclass has a default message.

## What the package does not do

- It has no HTTP server, routes, HTML pages or login forms. You wire the
  functions above into a web framework of your own choosing.
- It has no user store and does not check passwords. The user errors in
  `antimg.errors` are provided for such a store, but no store is included.
- It has no command-line program.