"""Free-hand signature capture"""

import base64
import io

from PIL import Image, ImageDraw

from ...config import SIGNATURE_HEIGHT, SIGNATURE_WIDTH
from ...errors import ValidationError

Point = tuple[float, float]

DATA_URL_PREFIX = "data:image/png;base64,"
STROKE_WIDTH = 2


class SignaturePad:
    """
    Records strokes drawn on the signature surface.

    At least one stroke counts as signed. The raster image is only rendered
    when export_png_base64() is called at submission time.
    """

    def __init__(self, width: int = SIGNATURE_WIDTH, height: int = SIGNATURE_HEIGHT):
        self.width = width
        self.height = height
        self.strokes: list[list[Point]] = []

    @property
    def signed(self) -> bool:
        return bool(self.strokes)

    def add_stroke(self, points: list[Point]) -> None:
        if not points:
            raise ValidationError("signature", "A stroke needs at least one point")
        self.strokes.append([(float(x), float(y)) for x, y in points])

    def load_strokes(self, strokes: list[list[Point]]) -> None:
        """Replace the drawing with strokes recorded earlier; empty strokes are skipped"""
        self.strokes = [[(float(x), float(y)) for x, y in stroke] for stroke in strokes if stroke]

    def clear(self) -> None:
        self.strokes = []

    def export_png_base64(self) -> str:
        """Render the signature to a PNG data URL"""
        if not self.signed:
            raise ValidationError("signature", "Draw your signature in the signature pad")

        image = Image.new("RGBA", (self.width, self.height), (255, 255, 255, 0))
        draw = ImageDraw.Draw(image)
        for stroke in self.strokes:
            if len(stroke) == 1:
                x, y = stroke[0]
                r = STROKE_WIDTH / 2
                draw.ellipse((x - r, y - r, x + r, y + r), fill="black")
            else:
                draw.line(stroke, fill="black", width=STROKE_WIDTH, joint="curve")

        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return DATA_URL_PREFIX + base64.b64encode(buffer.getvalue()).decode("ascii")
