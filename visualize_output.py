import os
import sys
import json
import argparse
from PIL import Image, ImageDraw, ImageFont

from contactscan.utils.image import load_image, preprocess_screenshot
from contactscan.utils.bbox import position_to_bbox


LINE_COLOR = (30, 144, 255)          # dodger blue: plain OCR lines
HIGH_CONF_COLOR = (34, 139, 34)      # forest green: confidence >= 0.9
MID_CONF_COLOR = (255, 140, 0)       # orange: confidence >= 0.7
LOW_CONF_COLOR = (255, 50, 50)       # red: anything lower


def _get_font(size=12):
    """Try to load a readable font, fall back to PIL default."""
    if sys.platform == "win32":
        candidates = [
            "C:/Windows/Fonts/consola.ttf",
            "C:/Windows/Fonts/arial.ttf",
        ]
    elif sys.platform == "darwin":
        candidates = [
            "/System/Library/Fonts/Menlo.ttc",
            "/Library/Fonts/Arial.ttf",
        ]
    else:  # Linux / Colab
        candidates = [
            "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
            "/usr/share/fonts/truetype/liberation/LiberationMono-Regular.ttf",
        ]
    for path in candidates:
        if os.path.exists(path):
            try:
                return ImageFont.truetype(path, size)
            except (OSError, IOError):
                continue
    return ImageFont.load_default()


def confidence_color(confidence):
    if confidence is None:
        return LOW_CONF_COLOR
    if confidence >= 0.9:
        return HIGH_CONF_COLOR
    if confidence >= 0.7:
        return MID_CONF_COLOR
    return LOW_CONF_COLOR


def contact_label(contact):
    """Short label: formatted number, then name if one was associated."""
    parts = [contact.get("formattedNumber") or contact.get("phoneNumber") or "?"]
    if contact.get("name"):
        parts.append(contact["name"])
    confidence = contact.get("confidence")
    if confidence is not None:
        parts.append(f"[{confidence:.2f}]")
    return " ".join(parts)


def _draw_label(draw, bbox, label, color, font):
    """Draw a text label above a bounding box on a dark background."""
    x1, y1 = int(bbox[0]), int(bbox[1])
    try:
        text_bbox = font.getbbox(label)
        tw = text_bbox[2] - text_bbox[0]
        th = text_bbox[3] - text_bbox[1]
    except AttributeError:
        tw, th = len(label) * 7, 12

    label_y = y1 - th - 4
    if label_y < 0:
        label_y = y1 + 2

    draw.rectangle([x1, label_y, x1 + tw + 4, label_y + th + 2], fill=(0, 0, 0))
    draw.text((x1 + 2, label_y), label, fill=color, font=font)


def visualize_screenshot(image_path, json_path, output_path, show_lines=True):
    """Draw OCR lines and extracted contacts over one screenshot."""
    img = load_image(image_path)
    if img is None:
        print(f"Error loading image {os.path.basename(image_path)}")
        return
    # Same preprocessing as the OCR pipeline so bbox coordinates line up.
    img = preprocess_screenshot(img)
    draw = ImageDraw.Draw(img)

    with open(json_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if "error" in data:
        print(f"  {os.path.basename(image_path)}: skipped ({data.get('error_kind', 'error')})")
        return

    font = _get_font(11)

    if show_lines:
        for line in data.get("lines", []):
            bbox = line.get("bbox")
            if bbox:
                draw.rectangle([int(v) for v in bbox], outline=LINE_COLOR, width=1)

    located = 0
    contacts = data.get("contacts", [])
    for contact in contacts:
        position = contact.get("position") or {}
        if not position.get("width") or not position.get("height"):
            continue
        bbox = position_to_bbox(position)
        color = confidence_color(contact.get("confidence"))
        draw.rectangle([int(v) for v in bbox], outline=color, width=3)
        _draw_label(draw, bbox, contact_label(contact), color, font)
        located += 1

    img.save(output_path)
    print(f"  {os.path.basename(image_path)}: "
          f"{len(data.get('lines', []))} lines, "
          f"{len(contacts)} contacts ({located} located)")


def visualize_directory(input_dir, json_dir, output_dir, show_lines=True):
    """Iterate through screenshots and create annotated copies."""
    os.makedirs(output_dir, exist_ok=True)

    valid_extensions = {".png", ".jpg", ".jpeg", ".bmp", ".webp", ".tif", ".tiff"}
    files = [f for f in sorted(os.listdir(input_dir))
             if os.path.splitext(f)[1].lower() in valid_extensions]

    if not files:
        print(f"No image files found in {input_dir}")
        return

    print(f"Found {len(files)} screenshots. Starting visualization...")

    for filename in files:
        image_path = os.path.join(input_dir, filename)
        json_path = os.path.join(json_dir, os.path.splitext(filename)[0] + ".json")

        if not os.path.exists(json_path):
            print(f"Skipping {filename}: JSON not found")
            continue

        output_path = os.path.join(output_dir, os.path.splitext(filename)[0] + ".png")
        try:
            visualize_screenshot(image_path, json_path, output_path, show_lines=show_lines)
        except (OSError, IOError, ValueError, KeyError) as e:
            print(f"Error processing {filename}: {e}")

    print(f"Visualization complete. Check {output_dir}")


def main():
    parser = argparse.ArgumentParser(
        description="Highlight extracted phone contacts on their screenshots.")
    parser.add_argument("--input_dir", type=str, default="input",
                        help="Directory containing source screenshots")
    parser.add_argument("--json_dir", type=str, default="output",
                        help="Directory containing JSON output files")
    parser.add_argument("--output_dir", type=str, default="output/visualized",
                        help="Directory to save annotated images")
    parser.add_argument("--no-lines", action="store_true",
                        help="Hide OCR line boxes")

    args = parser.parse_args()
    visualize_directory(args.input_dir, args.json_dir, args.output_dir,
                        show_lines=not args.no_lines)


if __name__ == "__main__":
    main()
