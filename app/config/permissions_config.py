"""
Permissions and Roles Configuration
Defines the permission matrix for every module and which account role holds
which permissions. Role gates in app.core.dependencies read from here; the
matrix is also returned by /auth/me so the frontend can hide what a user
cannot do.
"""

ADMIN = "admin"
MASTER = "master"
STUDENT = "student"

ROLES = (ADMIN, MASTER, STUDENT)
SELF_REGISTER_ROLES = (MASTER, STUDENT)

# Define modules and their actions
MODULES = {
    "users": {
        "resource": "users",
        "actions": ["read", "update", "delete"],
        "description": "User profile management"
    },
    "workshops": {
        "resource": "workshops",
        "actions": ["create", "update", "delete", "publish"],
        "description": "Workshop authoring and publishing"
    },
    "applications": {
        "resource": "applications",
        "actions": ["create", "read_own", "review"],
        "description": "Workshop applications"
    },
}

# Additional descriptions for non-CRUD actions
MODULE_SPECIFIC_PERMISSIONS = {
    "workshops": {
        "publish": "Publish or unpublish own workshops"
    },
    "applications": {
        "create": "Apply to published workshops",
        "read_own": "Track own applications",
        "review": "Approve or reject applications to own workshops"
    },
}

# Role -> permissions. Ownership is checked separately, per record.
ROLE_PERMISSIONS = {
    ADMIN: ["users:read", "users:update", "users:delete"],
    MASTER: [
        "workshops:create", "workshops:update", "workshops:delete", "workshops:publish",
        "applications:review",
    ],
    STUDENT: ["applications:create", "applications:read_own"],
}

# Where a user lands when a role gate turns them away
ROLE_HOME = {
    ADMIN: "/",
    MASTER: "/master/dashboard",
    STUDENT: "/student/dashboard",
}


def get_role_permissions(role: str) -> list:
    return sorted(ROLE_PERMISSIONS.get(role, []))


def get_permission_matrix():
    """
    Returns a dictionary with all permissions and the roles holding them
    Format: {
        "permissions": [
            {"name": "workshops:create", "resource": "workshops", "action": "create", "description": "..."},
            ...
        ],
        "roles": [
            {"name": "master", "permissions": ["applications:review", ...]},
            ...
        ]
    }
    """
    permissions = []

    for module_name, module_config in MODULES.items():
        resource = module_config["resource"]

        for action in module_config["actions"]:
            description = f"{action.capitalize()} {resource}"
            if module_name in MODULE_SPECIFIC_PERMISSIONS and action in MODULE_SPECIFIC_PERMISSIONS[module_name]:
                description = MODULE_SPECIFIC_PERMISSIONS[module_name][action]

            permissions.append({
                "name": f"{resource}:{action}",
                "resource": resource,
                "action": action,
                "description": description
            })

    roles = [
        {"name": role, "permissions": get_role_permissions(role)}
        for role in ROLES
    ]

    return {
        "permissions": permissions,
        "roles": roles
    }


PERMISSION_MATRIX = get_permission_matrix()
