from common.notify import ResourceNotifier


class ProjectNotifier(ResourceNotifier):
    channel = "projects"
    kind = "project"
    admin_list_route = "admin_projects_list"
    public_list_route = "projects_list"
    public_detail_route = "projects_detail"

    def is_public(self, obj) -> bool:
        return obj.is_published

    def payload(self, obj):
        return {
            "id": obj.pk,
            "title": obj.title,
            "slug": obj.slug,
            "isPublished": obj.is_published,
            "status": obj.status,
            "category": obj.category,
            "updatedAt": obj.updated_at,
        }


project_notifier = ProjectNotifier()
