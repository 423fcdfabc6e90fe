"""
Collection and document names used by the site.

The document store has no schema; these constants are the single place the
names are spelled out.
"""

SITE_CONFIG_COLLECTION = "siteConfig"

HOME_DOC_ID = "homeData"
ABOUT_DOC_ID = "aboutData"
CONTACT_DOC_ID = "contactData"
MEMBERS_DOC_ID = "membersData"

SUBMISSIONS_COLLECTION = "submissions"

GALLERY_ALBUMS_COLLECTION = "galleryAlbums"
GALLERY_IMAGES_COLLECTION = "galleryImages"
