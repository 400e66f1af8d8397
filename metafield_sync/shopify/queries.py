"""
GraphQL documents used by the sync pipeline (Admin API)
"""

PRODUCT_BY_HANDLE = """
query ProductId($handle: String!) {
  productByHandle(handle: $handle) { id title }
}
"""

METAFIELDS_SET = """
mutation SetMetafields($metafields: [MetafieldsSetInput!]!) {
  metafieldsSet(metafields: $metafields) {
    metafields { id namespace key }
    userErrors { field message }
  }
}
"""

FILES = """
query Files($query: String, $first: Int!) {
  files(first: $first, query: $query, sortKey: CREATED_AT, reverse: true) {
    edges {
      node {
        __typename
        id
        createdAt
        ... on GenericFile { url }
        ... on MediaImage { image { url } }
      }
    }
  }
}
"""
