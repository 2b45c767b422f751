import base64
import binascii
from dataclasses import dataclass, field
from typing import Any, Optional, Tuple

import requests

from .errors import ResponseShapeError, UpstreamError


Size = Tuple[int, int]

ICON_SIZE: Size = (256, 256)
PROOF_ICON_SIZE: Size = (1024, 1024)

NEGATIVE_PROMPT = ", ".join(
    [
        "text", "letters", "numbers", "watermark", "logo", "signature", "caption",
        "frame", "border", "UI", "interface",
        "badge", "medallion", "coin", "token", "emblem",
        "symmetry", "kaleidoscope",
        "lowres", "blurry", "deformed", "oversaturated",
    ]
)


class ImageGenerator:
    """
    Backend interface: turn a prompt into encoded image bytes.

    One synchronous request per call. Failures are raised, never retried.
    """

    name = "image"

    def generate(self, prompt: str, size: Size = ICON_SIZE) -> bytes:
        raise NotImplementedError


def _decode_b64(service: str, payload: str) -> bytes:
    # A1111 may hand back a data URI ("data:image/png;base64,....").
    if "," in payload:
        payload = payload.split(",", 1)[1]
    try:
        return base64.b64decode(payload)
    except (binascii.Error, ValueError) as err:
        raise ResponseShapeError(f"{service} returned an undecodable image: {err}") from err


@dataclass
class A1111Generator(ImageGenerator):
    """Self-hosted Stable Diffusion WebUI (AUTOMATIC1111) txt2img endpoint."""

    base_url: str
    steps: int = 30
    cfg_scale: float = 5
    # Widely available sampler; switch to "DPM++ SDE Karras" where installed.
    sampler_name: str = "DPM++ SDE"
    negative_prompt: str = NEGATIVE_PROMPT
    session: Any = field(default=None, repr=False)

    name = "A1111"

    @property
    def endpoint(self) -> str:
        return f"{self.base_url.rstrip('/')}/sdapi/v1/txt2img"

    def generate(self, prompt: str, size: Size = ICON_SIZE) -> bytes:
        width, height = size
        payload = {
            "prompt": prompt,
            "negative_prompt": self.negative_prompt,
            "width": width,
            "height": height,
            "steps": self.steps,
            "cfg_scale": self.cfg_scale,
            "sampler_name": self.sampler_name,
        }

        http = self.session or requests
        try:
            r = http.post(
                self.endpoint,
                json=payload,
                headers={"content-type": "application/json"},
            )
        except requests.RequestException as err:
            raise UpstreamError(self.name, None, str(err)) from err

        if not r.ok:
            raise UpstreamError(self.name, r.status_code, r.text)

        try:
            data = r.json()
        except ValueError as err:
            raise ResponseShapeError(f"{self.name} returned a non-JSON body.") from err

        images = data.get("images") if isinstance(data, dict) else None
        if not isinstance(images, list) or not images or not isinstance(images[0], str) or not images[0]:
            raise ResponseShapeError(f"{self.name} returned no images.")
        return _decode_b64(self.name, images[0])


@dataclass
class OpenAIImageGenerator(ImageGenerator):
    """Hosted OpenAI Images API (`images.generate`), base64 response."""

    api_key: Optional[str] = None
    model: str = "gpt-image-1"
    client: Any = field(default=None, repr=False)

    name = "Images API"

    def _get_client(self):
        if self.client is None:
            from openai import OpenAI

            # The SDK retries by default; a failed call must abort the run instead.
            self.client = OpenAI(api_key=self.api_key, max_retries=0)
        return self.client

    def generate(self, prompt: str, size: Size = PROOF_ICON_SIZE) -> bytes:
        import openai

        width, height = size
        client = self._get_client()
        try:
            rsp = client.images.generate(
                model=self.model,
                prompt=prompt,
                size=f"{width}x{height}",
            )
        except openai.APIStatusError as err:
            raise UpstreamError(self.name, err.status_code, err.response.text) from err
        except openai.APIConnectionError as err:
            raise UpstreamError(self.name, None, str(err)) from err

        data = getattr(rsp, "data", None) or []
        b64 = getattr(data[0], "b64_json", None) if data else None
        if not b64:
            raise ResponseShapeError(f"No b64_json returned from {self.name}.")
        return _decode_b64(self.name, b64)
