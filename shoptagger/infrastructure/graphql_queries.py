"""GraphQL documents for the Shopify Admin API."""

SEARCH_PRODUCTS_QUERY = """
query SearchProducts($query: String!, $first: Int!, $after: String) {
    products(query: $query, first: $first, after: $after) {
        edges {
            node {
                id
                title
                tags
            }
            cursor
        }
        pageInfo {
            hasNextPage
            endCursor
        }
    }
}
"""

COLLECTIONS_QUERY = """
query Collections($first: Int!) {
    collections(first: $first) {
        edges {
            node {
                id
                title
                handle
            }
        }
    }
}
"""

PRODUCT_TAGS_QUERY = """
query ProductTags($id: ID!) {
    product(id: $id) {
        id
        tags
    }
}
"""

UPDATE_PRODUCT_TAGS_MUTATION = """
mutation UpdateProductTags($input: ProductInput!) {
    productUpdate(input: $input) {
        product {
            id
            tags
        }
        userErrors {
            field
            message
        }
    }
}
"""

CREATE_PRODUCT_MUTATION = """
mutation CreateProduct($input: ProductInput!) {
    productCreate(input: $input) {
        product {
            id
            title
        }
        userErrors {
            field
            message
        }
    }
}
"""

DELETE_PRODUCT_MUTATION = """
mutation DeleteProduct($input: ProductDeleteInput!) {
    productDelete(input: $input) {
        deletedProductId
        userErrors {
            field
            message
        }
    }
}
"""
