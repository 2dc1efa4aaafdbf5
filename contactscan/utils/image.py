"""
Screenshot loading and preprocessing before OCR.
"""

import logging

import cv2
import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

# Screenshots narrower than this are upscaled; small UI fonts OCR poorly.
MIN_OCR_WIDTH = 1000


def load_image(image_path):
    """Loads a screenshot as RGB, flattening transparency onto white."""
    try:
        image = Image.open(image_path)
        image.load()
    except (OSError, ValueError) as e:
        logger.error("Error loading image %s: %s", image_path, e)
        return None

    if image.mode in ("RGBA", "LA", "P"):
        image = image.convert("RGBA")
        background = Image.new("RGB", image.size, (255, 255, 255))
        background.paste(image, mask=image.getchannel("A"))
        return background
    return image.convert("RGB")


def upscale_small_image(image, min_width=MIN_OCR_WIDTH):
    """Resize narrow screenshots (keeping aspect ratio) so glyphs reach a readable size."""
    if image.width >= min_width or image.width == 0:
        return image
    scale = min_width / image.width
    new_size = (min_width, max(1, int(round(image.height * scale))))
    logger.debug("Upscaling %dx%d screenshot by %.2f", image.width, image.height, scale)
    return image.resize(new_size, Image.LANCZOS)


def estimate_noise(image_np):
    """
    Estimates noise level using a median blur difference.
    Higher score means more noise.
    """
    try:
        gray = cv2.cvtColor(image_np, cv2.COLOR_RGB2GRAY)

        h, w = gray.shape
        if w > 1000:
            scale = 1000 / w
            gray = cv2.resize(gray, (0, 0), fx=scale, fy=scale)

        median = cv2.medianBlur(gray, 3)
        return float(np.mean(cv2.absdiff(gray, median)))
    except cv2.error:
        return 999.0


def denoise_image(image, noise_threshold=0.8):
    """
    Denoise photos of screens and compressed screenshots.

    Clean renders (noise score under ``noise_threshold``) are returned as-is.
    """
    img_np = np.array(image)
    if estimate_noise(img_np) < noise_threshold:
        return image

    try:
        img_bgr = cv2.cvtColor(img_np, cv2.COLOR_RGB2BGR)
        denoised_bgr = cv2.fastNlMeansDenoisingColored(img_bgr, None, 10, 10, 7, 21)
        return Image.fromarray(cv2.cvtColor(denoised_bgr, cv2.COLOR_BGR2RGB))
    except cv2.error as e:
        logger.warning("Denoising failed: %s", e)
        return image


def estimate_skew_angle(gray):
    """Median angle (degrees) of long near-horizontal lines, or None if too few."""
    h, w = gray.shape
    edges = cv2.Canny(gray, 50, 150, apertureSize=3)
    lines = cv2.HoughLinesP(edges, 1, np.pi / 180, threshold=50,
                            minLineLength=max(1, w // 4), maxLineGap=max(5, w // 100))
    if lines is None or len(lines) < 10:
        return None

    angles = []
    for line in lines:
        x1, y1, x2, y2 = line[0]
        if abs(x2 - x1) > 10:
            angle = np.degrees(np.arctan2(y2 - y1, x2 - x1))
            if -30 < angle < 30:
                angles.append(angle)

    if len(angles) < 5:
        return None
    return float(np.median(angles))


def deskew_image(image, angle_threshold=0.5, max_angle=15.0):
    """
    Straighten photographed screens.

    Rotation is applied only when the estimated skew lies between
    ``angle_threshold`` and ``max_angle`` degrees.
    """
    try:
        angle = estimate_skew_angle(np.array(image.convert('L')))
        if angle is None or abs(angle) < angle_threshold or abs(angle) > max_angle:
            return image

        logger.debug("Detected skew: %.2f degrees, applying correction", angle)
        # PIL rotates counter-clockwise for positive angles; expand keeps corners.
        return image.rotate(angle, resample=Image.BICUBIC, expand=True,
                            fillcolor=(255, 255, 255))
    except cv2.error as e:
        logger.warning("Deskew failed: %s", e)
        return image


def preprocess_screenshot(image):
    """Upscale, denoise and deskew a screenshot ahead of OCR."""
    image = upscale_small_image(image)
    image = denoise_image(image)
    return deskew_image(image)
