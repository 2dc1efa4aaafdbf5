from .recognizer import ScreenshotRecognizer

__all__ = ['ScreenshotRecognizer']
