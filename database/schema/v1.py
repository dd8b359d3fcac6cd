"""Schema v1 - Initial database schema.

This version includes tables for:
- Users and their role profiles (customers, sellers)
- Refresh tokens, one per user
- Categories, products and product images
"""

schema = {
    'version': 1,
    'tables': [
        {
            'name': 'users',
            'columns': [
                {'name': 'id', 'type': 'UUID', 'primary_key': True, 'default': 'gen_random_uuid()'},
                {'name': 'user_type', 'type': 'TEXT', 'nullable': False},
                {'name': 'username', 'type': 'TEXT', 'nullable': False},
                {'name': 'email', 'type': 'TEXT', 'nullable': False},
                {'name': 'password_hash', 'type': 'TEXT', 'nullable': False},
                {'name': 'created_at', 'type': 'TIMESTAMPTZ', 'nullable': False, 'default': 'now()'},
                {'name': 'updated_at', 'type': 'TIMESTAMPTZ', 'nullable': False, 'default': 'now()'}
            ],
            'checks': [
                {'name': 'chk_users_user_type', 'expression': "user_type IN ('customer', 'seller')"}
            ],
            'indexes': [
                {'name': 'idx_users_type_username', 'columns': ['user_type', 'username'], 'unique': True},
                {'name': 'idx_users_type_email', 'columns': ['user_type', 'email'], 'unique': True}
            ]
        },
        {
            'name': 'customers',
            'columns': [
                {'name': 'user_id', 'type': 'UUID', 'primary_key': True},
                {'name': 'first_name', 'type': 'TEXT'},
                {'name': 'last_name', 'type': 'TEXT'},
                {'name': 'phone', 'type': 'TEXT'},
                {'name': 'date_birth', 'type': 'TIMESTAMPTZ'},
                {'name': 'address', 'type': 'TEXT'}
            ],
            'foreign_keys': [
                {'columns': ['user_id'], 'references': 'users(id)', 'on_delete': 'CASCADE'}
            ]
        },
        {
            'name': 'sellers',
            'columns': [
                {'name': 'user_id', 'type': 'UUID', 'primary_key': True},
                {'name': 'company_name', 'type': 'TEXT'},
                {'name': 'rating', 'type': 'DECIMAL(3, 2)'}
            ],
            'checks': [
                {'name': 'chk_sellers_rating', 'expression': 'rating IS NULL OR (rating >= 0 AND rating <= 5)'}
            ],
            'foreign_keys': [
                {'columns': ['user_id'], 'references': 'users(id)', 'on_delete': 'CASCADE'}
            ]
        },
        {
            'name': 'tokens',
            'columns': [
                {'name': 'user_id', 'type': 'UUID', 'primary_key': True},
                {'name': 'token', 'type': 'TEXT', 'nullable': False},
                {'name': 'expires_at', 'type': 'TIMESTAMPTZ', 'nullable': False},
                {'name': 'is_revoked', 'type': 'BOOLEAN', 'nullable': False, 'default': 'false'},
                {'name': 'created_at', 'type': 'TIMESTAMPTZ', 'nullable': False, 'default': 'now()'},
                {'name': 'updated_at', 'type': 'TIMESTAMPTZ', 'nullable': False, 'default': 'now()'}
            ],
            'foreign_keys': [
                {'columns': ['user_id'], 'references': 'users(id)', 'on_delete': 'CASCADE'}
            ]
        },
        {
            'name': 'categories',
            'columns': [
                {'name': 'id', 'type': 'UUID', 'primary_key': True, 'default': 'gen_random_uuid()'},
                {'name': 'name', 'type': 'TEXT', 'nullable': False},
                {'name': 'created_at', 'type': 'TIMESTAMPTZ', 'nullable': False, 'default': 'now()'},
                {'name': 'updated_at', 'type': 'TIMESTAMPTZ', 'nullable': False, 'default': 'now()'}
            ]
        },
        {
            'name': 'products',
            'columns': [
                {'name': 'id', 'type': 'UUID', 'primary_key': True, 'default': 'gen_random_uuid()'},
                {'name': 'seller_id', 'type': 'UUID', 'nullable': False},
                {'name': 'category_id', 'type': 'UUID', 'nullable': False},
                {'name': 'title', 'type': 'TEXT', 'nullable': False},
                {'name': 'description', 'type': 'TEXT'},
                {'name': 'price', 'type': 'DECIMAL(12, 2)', 'nullable': False},
                {'name': 'is_active', 'type': 'BOOLEAN', 'nullable': False, 'default': 'true'},
                {'name': 'created_at', 'type': 'TIMESTAMPTZ', 'nullable': False, 'default': 'now()'},
                {'name': 'updated_at', 'type': 'TIMESTAMPTZ', 'nullable': False, 'default': 'now()'}
            ],
            'checks': [
                {'name': 'chk_products_price', 'expression': 'price >= 0'}
            ],
            'foreign_keys': [
                {'columns': ['seller_id'], 'references': 'users(id)', 'on_delete': 'CASCADE'},
                {'columns': ['category_id'], 'references': 'categories(id)', 'on_delete': 'CASCADE'}
            ],
            'indexes': [
                {'name': 'idx_products_category', 'columns': ['category_id']},
                {'name': 'idx_products_seller', 'columns': ['seller_id']},
                {'name': 'idx_products_title', 'columns': ['title']}
            ]
        },
        {
            'name': 'product_images',
            'columns': [
                {'name': 'id', 'type': 'UUID', 'primary_key': True, 'default': 'gen_random_uuid()'},
                {'name': 'product_id', 'type': 'UUID', 'nullable': False},
                {'name': 'url', 'type': 'TEXT', 'nullable': False},
                {'name': 'created_at', 'type': 'TIMESTAMPTZ', 'nullable': False, 'default': 'now()'}
            ],
            'foreign_keys': [
                {'columns': ['product_id'], 'references': 'products(id)', 'on_delete': 'CASCADE'}
            ],
            'indexes': [
                {'name': 'idx_product_images_product', 'columns': ['product_id']}
            ]
        }
    ],
    'migrations': []
}
