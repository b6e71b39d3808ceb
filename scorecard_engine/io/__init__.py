from .images import ImageSource, encode_image, is_svg_source, load_image

__all__ = ["ImageSource", "encode_image", "is_svg_source", "load_image"]
