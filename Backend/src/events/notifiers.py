from common.notify import ResourceNotifier, public_path
from .models import Event


class EventNotifier(ResourceNotifier):
    channel = "events"
    kind = "event"
    admin_list_route = "admin_events_list"
    public_list_route = "events_list"
    public_detail_route = "events_detail"

    def is_public(self, obj) -> bool:
        return obj.status == Event.Status.PUBLISHED

    def detail_values(self, obj):
        # la page de detail repond au slug et a l'id
        values = super().detail_values(obj)
        if obj.pk:
            values.append(str(obj.pk))
        return values

    def related_paths(self, obj):
        if obj.antenne_id is None:
            return []
        return [public_path("antennes_stats", obj.antenne.city)]

    def payload(self, obj):
        return {
            "id": obj.pk,
            "title": obj.title,
            "slug": obj.slug,
            "status": obj.status,
            "category": obj.category,
            "startDate": obj.start_date,
            "updatedAt": obj.updated_at,
        }


event_notifier = EventNotifier()
