from laundry_saas.constants.activity_codes import ActivityCode


ACTIVITY_TEMPLATES = {
    # ---------------- AUTH ----------------
    ActivityCode.LOGIN:
        "{actor_role} ({actor_email}) logged in",

    ActivityCode.LOGOUT:
        "{actor_role} ({actor_email}) logged out",

    # ---------------- TENANCIES ----------------
    ActivityCode.CREATE_TENANCY:
        "{actor_role} ({actor_email}) onboarded tenancy {target_name} ({slug})",

    ActivityCode.DEACTIVATE_TENANCY:
        "{actor_role} ({actor_email}) deactivated tenancy {target_name}",

    # ---------------- DISCOUNTS ----------------
    ActivityCode.CREATE_DISCOUNT:
        "{actor_role} ({actor_email}) created discount {target_name}",

    ActivityCode.UPDATE_DISCOUNT:
        "{actor_role} ({actor_email}) updated discount {target_name}: {changes}",

    ActivityCode.DELETE_DISCOUNT:
        "{actor_role} ({actor_email}) deleted discount {target_name}",

    ActivityCode.TOGGLE_DISCOUNT:
        "{actor_role} ({actor_email}) {state} discount {target_name}",

    ActivityCode.APPLY_DISCOUNTS:
        "{actor_role} ({actor_email}) applied {count} discount(s) "
        "worth {total_discount} for customer {customer_id}",

    ActivityCode.EXPIRE_DISCOUNT:
        "{actor_role} ({actor_email}) expired discount {target_name}: {changes}",

    # ---------------- CAMPAIGNS ----------------
    ActivityCode.CREATE_CAMPAIGN:
        "{actor_role} ({actor_email}) created {scope} campaign {target_name}",

    ActivityCode.UPDATE_CAMPAIGN:
        "{actor_role} ({actor_email}) updated campaign {target_name}: {changes}",

    ActivityCode.DELETE_CAMPAIGN:
        "{actor_role} ({actor_email}) deleted campaign {target_name}",

    ActivityCode.CHANGE_CAMPAIGN_STATUS:
        "{actor_role} ({actor_email}) moved campaign {target_name} "
        "from {old_status} to {new_status}",

    ActivityCode.APPROVE_CAMPAIGN:
        "{actor_role} ({actor_email}) approved campaign {target_name}",

    ActivityCode.APPLY_CAMPAIGN:
        "{actor_role} ({actor_email}) redeemed campaign {target_name} "
        "saving {total_discount}",

    ActivityCode.COMPLETE_CAMPAIGN:
        "{actor_role} ({actor_email}) completed campaign {target_name}: {changes}",
}
