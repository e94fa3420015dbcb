from common.notify import ResourceNotifier


class DocumentNotifier(ResourceNotifier):
    channel = "documents"
    kind = "document"
    admin_list_route = "admin_documents_list"
    public_list_route = "documents_list"
    public_detail_route = "documents_detail"

    def is_public(self, obj) -> bool:
        return obj.is_published

    def payload(self, obj):
        return {
            "id": obj.pk,
            "title": obj.title,
            "slug": obj.slug,
            "isPublished": obj.is_published,
            "category": obj.category,
            "visibility": obj.visibility,
            "version": obj.version,
            "updatedAt": obj.updated_at,
        }


document_notifier = DocumentNotifier()
