"""JSON representations of catalog records."""

from litestar import Request

from vitrine.db.models import Category, Product


def build_base_url(request: Request) -> str:
    """Return ``scheme://host`` as seen by the client, honouring proxy headers."""
    host = request.headers.get("x-forwarded-host") or request.headers.get("host")
    if not host:
        return ""
    scheme = request.headers.get("x-forwarded-proto") or request.url.scheme
    return f"{scheme}://{host}"


def serialize_category(category: Category) -> dict:
    return {
        "id": str(category.id),
        "slug": category.slug,
        "name": category.name,
        "headline": category.headline,
        "description": category.description,
        "heroImage": category.hero_image,
        "heroAlt": category.hero_alt,
        "seo": {
            "title": category.seo_title,
            "description": category.seo_description,
        },
        "highlights": [highlight.text for highlight in category.highlights],
        "position": category.position,
    }


def serialize_product(product: Product, base_url: str = "", upload_prefix: str = "/uploads") -> dict:
    """Render a product; uploaded media sources are made absolute when ``base_url`` is given."""
    prefix = base_url.rstrip("/")
    upload_segment = "/" + upload_prefix.strip("/") + "/"

    def media_src(src: str) -> str:
        if prefix and src.startswith(upload_segment):
            return f"{prefix}{src}"
        return src

    return {
        "id": str(product.id),
        "slug": product.slug,
        "categoryId": str(product.category_id),
        "categorySlug": product.category.slug if product.category else None,
        "name": product.name,
        "summary": product.summary,
        "description": product.description,
        "media": [
            {
                "id": item.id,
                "src": media_src(item.src),
                "alt": item.alt,
                "order": item.position,
            }
            for item in product.media
        ],
        "assets": [
            {
                "id": item.id,
                "type": item.type,
                "url": item.url,
                "title": item.title,
                "description": item.description,
            }
            for item in product.assets
        ],
        "specs": {
            "designer": product.designer,
            "dimensions": product.dimensions,
            "materials": [item.name for item in product.materials],
            "finishOptions": [item.name for item in product.finish_options],
            "lightSource": product.light_source,
            "leadTime": product.lead_time,
            "warranty": product.warranty,
            "customization": [item.description for item in product.customizations],
        },
    }
