from common.notify import ResourceNotifier


class PartnerNotifier(ResourceNotifier):
    channel = "partners"
    kind = "partner"
    admin_list_route = "admin_partners_list"
    public_list_route = "partners_list"

    def payload(self, obj):
        return {"id": obj.pk, "title": obj.name, "type": obj.type, "order": obj.order,
                "updatedAt": obj.updated_at}


class AntenneNotifier(ResourceNotifier):
    channel = "antennes"
    kind = "antenne"
    admin_list_route = "admin_antennes_list"
    public_list_route = "antennes_list"
    public_detail_route = "antennes_stats"
    detail_lookup = "city"

    def payload(self, obj):
        return {"id": obj.pk, "title": obj.name or obj.city, "city": obj.city, "updatedAt": obj.updated_at}


class ExecutiveMemberNotifier(ResourceNotifier):
    channel = "members"
    kind = "member"
    admin_list_route = "admin_executive_members_list"
    public_list_route = "executive_members_list"

    def is_public(self, obj):
        return obj.is_active

    def payload(self, obj):
        return {"id": obj.pk, "title": obj.name, "position": obj.position, "isPublished": obj.is_active,
                "updatedAt": obj.updated_at}
